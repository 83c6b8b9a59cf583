"""Template resource access and the plain summary fallback."""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Mapping, Protocol

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from .errors import TemplateResourceUnavailable
from .registry import RegistryEntry

logger = logging.getLogger(__name__)


class TemplateProvider(Protocol):
    def load(self, entry: RegistryEntry) -> bytes:
        ...


class DirectoryTemplateProvider:
    """Read fillable templates from a directory on disk."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, entry: RegistryEntry) -> Path:
        return self.root / entry.template

    def load(self, entry: RegistryEntry) -> bytes:
        path = self.path_for(entry)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise TemplateResourceUnavailable(entry.form_type, f"{path.name} not found") from None
        except OSError as exc:
            raise TemplateResourceUnavailable(entry.form_type, str(exc)) from exc


def render_summary(entry: RegistryEntry, values: Mapping[str, str]) -> bytes:
    """Render ``values`` as ``field: value`` lines under the form title.

    Used when a template cannot be loaded and the summary fallback is enabled.
    """

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=letter)
    c.setFont("Helvetica-Bold", 20)
    c.drawString(50, 750, entry.title)
    c.setFont("Helvetica", 12)
    y = 700
    for key, value in values.items():
        c.drawString(50, y, f"{key}: {value}")
        y -= 25
        if y < 50:
            c.showPage()
            c.setFont("Helvetica", 12)
            y = 750
    c.showPage()
    c.save()
    return buffer.getvalue()


__all__ = ["DirectoryTemplateProvider", "TemplateProvider", "render_summary"]
