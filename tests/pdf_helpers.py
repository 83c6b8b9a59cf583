"""Helpers that build small fillable templates and signature images for tests.

The real templates are third-party documents that are not shipped with the
repository, so the tests generate AcroForm documents with reportlab that carry
every field identifier a registry entry may write.
"""

from __future__ import annotations

import base64
from io import BytesIO
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from PIL import Image, ImageDraw
from pypdf import PdfReader, PdfWriter
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from modules.formfill.registry import RegistryEntry, list_entries, template_fields
from modules.formfill.rules import CHECK, RadioRule, RatingRule, targets

FIELD_WIDTH = 90
FIELD_HEIGHT = 12
ROW_STEP = 18
COLUMN_STEP = 100
TOP = 760
BOTTOM = 40


def build_template(
    path: Path,
    text_fields: Iterable[str] = (),
    checkboxes: Iterable[str] = (),
    radios: Mapping[str, Sequence[str]] | None = None,
) -> Path:
    """Write an AcroForm document with the given fields laid out in a grid."""

    c = canvas.Canvas(str(path), pagesize=letter)
    form = c.acroForm
    state = {"x": 20, "y": TOP}

    def next_slot() -> tuple[float, float]:
        x, y = state["x"], state["y"]
        state["x"] += COLUMN_STEP
        if state["x"] > 520:
            state["x"] = 20
            state["y"] -= ROW_STEP
            if state["y"] < BOTTOM:
                c.showPage()
                state["y"] = TOP
        return x, y

    for name in text_fields:
        x, y = next_slot()
        form.textfield(
            name=name,
            x=x,
            y=y,
            width=FIELD_WIDTH,
            height=FIELD_HEIGHT,
            borderWidth=0,
            fontName="Helvetica",
            fontSize=6,
        )
    for name in checkboxes:
        x, y = next_slot()
        form.checkbox(name=name, x=x, y=y, size=10, checked=False, buttonStyle="check")
    for group, values in (radios or {}).items():
        for index, value in enumerate(values):
            x, y = next_slot()
            form.radio(
                name=group,
                value=value,
                selected=index == len(values) - 1,
                x=x,
                y=y,
                size=10,
                buttonStyle="circle",
            )
    c.showPage()
    c.save()
    return Path(path)


def field_kinds(entry: RegistryEntry) -> tuple[list[str], list[str], dict[str, list[str]]]:
    """Split the fields of ``entry`` into text fields, checkboxes and radio groups."""

    checkboxes: list[str] = []
    radios: dict[str, list[str]] = {}
    for rule in entry.rules:
        if isinstance(rule, RatingRule) and rule.mark == CHECK:
            checkboxes.extend(targets(rule))
        elif isinstance(rule, RadioRule):
            states = list(dict.fromkeys([*rule.states.values(), *([rule.default_state] if rule.default_state else [])]))
            radios[rule.group] = [state.lstrip("/") for state in states]
    special = set(checkboxes) | set(radios)
    text_fields = [field_id for field_id in template_fields(entry) if field_id not in special]
    return text_fields, checkboxes, radios


def build_entry_template(directory: Path, entry: RegistryEntry, *, skip: Iterable[str] = ()) -> Path:
    skipped = set(skip)
    text_fields, checkboxes, radios = field_kinds(entry)
    return build_template(
        Path(directory) / entry.template,
        [f for f in text_fields if f not in skipped],
        [f for f in checkboxes if f not in skipped],
        {group: values for group, values in radios.items() if group not in skipped},
    )


def build_registry_templates(directory: Path) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    for entry in list_entries():
        build_entry_template(directory, entry)
    return directory


def signature_png(size: tuple[int, int] = (160, 50), mode: str = "RGBA") -> bytes:
    background = (255, 255, 255, 0) if mode == "RGBA" else (255, 255, 255)
    image = Image.new(mode, size, background)
    draw = ImageDraw.Draw(image)
    ink = (10, 10, 80, 255) if mode == "RGBA" else (10, 10, 80)
    draw.line((5, size[1] - 10, size[0] // 2, 8, size[0] - 5, size[1] - 12), fill=ink, width=3)
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def signature_data_url(mode: str = "RGBA") -> str:
    return "data:image/png;base64," + base64.b64encode(signature_png(mode=mode)).decode("ascii")


def plain_pdf(pages: int = 1, label: str = "page") -> bytes:
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=letter)
    for number in range(1, pages + 1):
        c.drawString(72, 720, f"{label} {number}")
        c.showPage()
    c.save()
    return buffer.getvalue()


def blank_page_writer(width: float = 612, height: float = 792) -> PdfWriter:
    writer = PdfWriter()
    writer.add_blank_page(width=width, height=height)
    return writer


def page_count(content: bytes) -> int:
    return len(PdfReader(BytesIO(content)).pages)


def field_values(content: bytes) -> dict[str, object]:
    fields = PdfReader(BytesIO(content)).get_fields() or {}
    return {name: info.get("/V") for name, info in fields.items()}


def document_text(content: bytes) -> str:
    return "\n".join(page.extract_text() or "" for page in PdfReader(BytesIO(content)).pages)


def page_xobjects(page) -> list[str]:
    resources = page.get("/Resources")
    if resources is None:
        return []
    xobjects = resources.get_object().get("/XObject")
    return list(xobjects.get_object().keys()) if xobjects is not None else []


__all__ = [
    "blank_page_writer",
    "build_entry_template",
    "build_registry_templates",
    "build_template",
    "document_text",
    "field_kinds",
    "field_values",
    "page_count",
    "page_xobjects",
    "plain_pdf",
    "signature_data_url",
    "signature_png",
]
