"""Environment driven settings for the form filling engine.

Values are read once per call to :func:`load_settings` so tests can adjust the
environment with ``monkeypatch`` and rebuild the service afterwards.  Flags
accept ``1/true/yes/on`` (case-insensitive) as enabled.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _number(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class FormFillSettings:
    data_dir: Path
    template_dir: Path
    placeholders: bool = True
    summary_fallback: bool = False
    signature_labels: bool = True
    fetch_timeout: float = 10.0
    compile_workers: int = 4
    log_level: str = "INFO"

    @property
    def database_path(self) -> Path:
        return self.data_dir / "formfill.db"


def load_settings() -> FormFillSettings:
    """Build :class:`FormFillSettings` from ``FORMFILL_*`` environment variables."""

    data_dir = Path(os.environ.get("FORMFILL_DATA_DIR", "data"))
    template_dir = Path(
        os.environ.get("FORMFILL_TEMPLATE_DIR", str(data_dir / "templates" / "forms"))
    )
    workers = int(_number("FORMFILL_COMPILE_WORKERS", 4))
    return FormFillSettings(
        data_dir=data_dir,
        template_dir=template_dir,
        placeholders=_flag("FORMFILL_PLACEHOLDERS", True),
        summary_fallback=_flag("FORMFILL_SUMMARY_FALLBACK", False),
        signature_labels=_flag("FORMFILL_SIGNATURE_LABELS", True),
        fetch_timeout=max(_number("FORMFILL_FETCH_TIMEOUT", 10.0), 0.1),
        compile_workers=max(workers, 1),
        log_level=os.environ.get("FORMFILL_LOG_LEVEL", "INFO").upper(),
    )


__all__ = ["FormFillSettings", "load_settings"]
