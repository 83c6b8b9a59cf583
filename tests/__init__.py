"""Test package initialisation.

The project source lives one directory level above this package.  Append the
repository root to ``sys.path`` so ``import modules.formfill`` and the shared
``tests.pdf_helpers`` resolve when the tests run in isolation.
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))
