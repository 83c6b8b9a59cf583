"""Overlay client and staff signatures onto a filled page."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from pypdf import PageObject, PdfReader
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from modules.formfill.errors import SignatureDecodeFailure

from .decode import SignatureFetcher, decode_signature
from .models import SignatureRect, to_draw_space
from .store import SignaturePositionStore

logger = logging.getLogger(__name__)

LABELS = {"client": "Client Signature", "staff": "Staff Signature"}
LABEL_OFFSET = 15
LABEL_FONT_SIZE = 8
LABEL_GREY = (0.3, 0.3, 0.3)


@dataclass(frozen=True, slots=True)
class SignatureSet:
    """Signature payloads supplied with a submission (data URL, base64 or URL)."""

    client: Optional[str] = None
    staff: Optional[str] = None
    legacy: Optional[str] = None


@dataclass(frozen=True, slots=True)
class PlacedSignature:
    role: str
    rect: SignatureRect
    draw_y: float
    page_height: float


def _page_size(page: PageObject) -> tuple[float, float]:
    box = page.mediabox
    return float(box.width), float(box.height)


def _overlay(
    placements: list[tuple[str, SignatureRect, object]],
    page_width: float,
    page_height: float,
    labels: bool,
) -> bytes:
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=(page_width, page_height))
    for role, rect, image in placements:
        draw_y = to_draw_space(rect, page_height)
        c.drawImage(
            ImageReader(image),
            rect.x,
            draw_y,
            width=rect.width,
            height=rect.height,
            mask="auto",
        )
        if labels:
            c.setFont("Helvetica", LABEL_FONT_SIZE)
            c.setFillColorRGB(*LABEL_GREY)
            c.drawString(rect.x, draw_y + rect.height + LABEL_OFFSET, LABELS.get(role, role.title()))
    c.showPage()
    c.save()
    return buffer.getvalue()


def resolve_placements(
    form_type: str, signatures: SignatureSet, store: SignaturePositionStore
) -> list[tuple[str, SignatureRect, str]]:
    """Pair each supplied signature payload with the rectangle it belongs in.

    Dual form types place ``client`` and ``staff`` independently.  Form types
    with a single rectangle use it for the client role and fall back to the
    legacy single-signature field.
    """

    dual = store.get_dual(form_type)
    if dual is not None:
        pairs = [("client", dual.client, signatures.client), ("staff", dual.staff, signatures.staff)]
    else:
        pairs = [("client", store.get(form_type), signatures.client or signatures.legacy)]
    return [(role, rect, payload) for role, rect, payload in pairs if payload]


def composite(
    page: PageObject,
    form_type: str,
    signatures: SignatureSet,
    store: SignaturePositionStore,
    *,
    fetcher: Optional[SignatureFetcher] = None,
    labels: bool = True,
) -> list[PlacedSignature]:
    """Draw the configured signatures onto ``page`` in place.

    A role whose image cannot be decoded is logged and left out; the other
    role and the rest of the document are unaffected.
    """

    page_width, page_height = _page_size(page)
    placed: list[PlacedSignature] = []
    for role, rect, payload in resolve_placements(form_type, signatures, store):
        try:
            image = decode_signature(payload, role, rect.opacity, fetcher)
            overlay = PdfReader(BytesIO(_overlay([(role, rect, image)], page_width, page_height, labels)))
            page.merge_page(overlay.pages[0])
        except SignatureDecodeFailure as exc:
            logger.warning(
                "[signatures] skipped %s signature on %s: %s",
                role,
                form_type,
                exc.reason,
                extra={"form_type": form_type, "role": role},
            )
            continue
        except Exception as exc:
            logger.warning(
                "[signatures] failed to embed %s signature on %s: %s",
                role,
                form_type,
                exc,
                extra={"form_type": form_type, "role": role},
            )
            continue
        placed.append(
            PlacedSignature(role=role, rect=rect, draw_y=to_draw_space(rect, page_height), page_height=page_height)
        )
    return placed


__all__ = ["PlacedSignature", "SignatureSet", "composite", "resolve_placements"]
