"""Fill one template with merged submission data and signatures."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from io import BytesIO
from typing import Any, Mapping, Optional

from pypdf import PdfReader, PdfWriter
from pypdf.generic import NameObject

from modules.signatures.compositing import PlacedSignature, SignatureSet, composite
from modules.signatures.decode import SignatureFetcher
from modules.signatures.store import SignaturePositionStore

from .errors import TemplateResourceUnavailable
from .mapping import FieldPlan, evaluate_rules
from .registry import RegistryEntry, get_entry
from .rules import CHECK
from .templates import TemplateProvider, render_summary

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FilledDocument:
    form_type: str
    content: bytes
    plan: FieldPlan
    signatures: list[PlacedSignature] = field(default_factory=list)
    flattened: bool = True
    summary: bool = False


def _on_state(field_info: Mapping[str, Any]) -> str:
    for state in field_info.get("/_States_", []) or []:
        if state != "/Off":
            return str(state)
    return "/Yes"


class DocumentFiller:
    """Write a :class:`FieldPlan` into a template and overlay signatures."""

    def __init__(
        self,
        templates: TemplateProvider,
        positions: SignaturePositionStore,
        *,
        fetcher: Optional[SignatureFetcher] = None,
        summary_fallback: bool = False,
        signature_labels: bool = True,
    ) -> None:
        self.templates = templates
        self.positions = positions
        self.fetcher = fetcher
        self.summary_fallback = summary_fallback
        self.signature_labels = signature_labels

    # ---- public API ---------------------------------------------------
    def fill(
        self,
        form_type: str,
        merged_data: Mapping[str, Any],
        signatures: SignatureSet,
        *,
        flatten: Optional[bool] = None,
        today: Optional[date] = None,
    ) -> bytes:
        return self.fill_document(form_type, merged_data, signatures, flatten=flatten, today=today).content

    def fill_document(
        self,
        form_type: str,
        merged_data: Mapping[str, Any],
        signatures: SignatureSet,
        *,
        flatten: Optional[bool] = None,
        today: Optional[date] = None,
    ) -> FilledDocument:
        """Fill ``form_type`` and return the bytes with what was written.

        Raises :class:`UnsupportedFormType` for unknown form types and
        :class:`TemplateResourceUnavailable` when the template cannot be read
        (unless the summary fallback is enabled).
        """

        entry = get_entry(form_type)
        try:
            raw = self.templates.load(entry)
        except TemplateResourceUnavailable as exc:
            if not self.summary_fallback:
                raise
            logger.warning("[formfill] %s; rendering summary page instead", exc)
            plan = evaluate_rules(entry.form_type, entry.rules, merged_data, None, today)
            return FilledDocument(
                form_type=entry.form_type,
                content=render_summary(entry, plan.values),
                plan=plan,
                flattened=True,
                summary=True,
            )

        reader = self._open(entry, raw)
        fields = reader.get_fields() or {}
        plan = evaluate_rules(entry.form_type, entry.rules, merged_data, set(fields), today)
        do_flatten = entry.flatten if flatten is None else flatten

        writer = PdfWriter()
        writer.clone_reader_document_root(reader)
        self._write_fields(writer, plan, fields, do_flatten)

        placed: list[PlacedSignature] = []
        if writer.pages:
            page_index = min(entry.signature_page, len(writer.pages) - 1)
            placed = composite(
                writer.pages[page_index],
                entry.form_type,
                signatures,
                self.positions,
                fetcher=self.fetcher,
                labels=self.signature_labels,
            )

        if do_flatten:
            writer.remove_annotations(subtypes="/Widget")
            if "/AcroForm" in writer.root_object:
                del writer.root_object[NameObject("/AcroForm")]

        buffer = BytesIO()
        writer.write(buffer)
        logger.info(
            "[formfill] filled %s: %d fields, %d missing, %d signatures",
            entry.form_type,
            len(plan.values) + len(plan.states),
            len(plan.missing),
            len(placed),
        )
        return FilledDocument(
            form_type=entry.form_type,
            content=buffer.getvalue(),
            plan=plan,
            signatures=placed,
            flattened=do_flatten,
        )

    # ---- internals ----------------------------------------------------
    def _open(self, entry: RegistryEntry, raw: bytes) -> PdfReader:
        try:
            reader = PdfReader(BytesIO(raw))
            if not reader.pages:
                raise ValueError("template has no pages")
            return reader
        except Exception as exc:
            raise TemplateResourceUnavailable(entry.form_type, f"unreadable template: {exc}") from exc

    def _write_fields(
        self,
        writer: PdfWriter,
        plan: FieldPlan,
        fields: Mapping[str, Mapping[str, Any]],
        flatten: bool,
    ) -> None:
        values: dict[str, Any] = {}
        for field_id, value in plan.values.items():
            if value == CHECK:
                values[field_id] = NameObject(_on_state(fields.get(field_id, {})))
            else:
                values[field_id] = value
        for group, state in plan.states.items():
            values[group] = NameObject(state)
        if not values:
            return
        for page in writer.pages:
            if "/Annots" not in page:
                continue
            writer.update_page_form_field_values(
                page,
                values,
                auto_regenerate=not flatten,
                flatten=flatten,
            )


__all__ = ["DocumentFiller", "FilledDocument"]
