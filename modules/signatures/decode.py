"""Turn submitted signature payloads into transparent RGBA images."""

from __future__ import annotations

import base64
import binascii
import logging
from io import BytesIO
from typing import Optional

import httpx
from PIL import Image, UnidentifiedImageError

from modules.formfill.errors import SignatureDecodeFailure

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(10.0, connect=5.0)

# Pixels at or above this grey level count as paper when knocking out
# backgrounds of images without an alpha channel.
WHITE_THRESHOLD = 245


class SignatureFetcher:
    """Thin wrapper around httpx so remote signatures can be mocked in tests."""

    def __init__(self, timeout: float | httpx.Timeout = DEFAULT_TIMEOUT, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
            headers={"User-Agent": "formfill-signature-fetcher"},
        )

    def fetch(self, url: str) -> bytes:
        response = self._client.get(url)
        response.raise_for_status()
        return response.content

    def close(self) -> None:
        self._client.close()


def payload_bytes(payload: str, role: str, fetcher: Optional[SignatureFetcher] = None) -> bytes:
    """Return raw image bytes from a data URL, bare base64 text or http(s) URL."""

    text = payload.strip()
    if text.startswith(("http://", "https://")):
        if fetcher is None:
            raise SignatureDecodeFailure(role, "remote signatures are disabled")
        try:
            return fetcher.fetch(text)
        except httpx.HTTPError as exc:
            raise SignatureDecodeFailure(role, f"fetch failed: {exc}") from exc
    if text.startswith("data:"):
        header, _, text = text.partition(",")
        if ";base64" not in header:
            raise SignatureDecodeFailure(role, "only base64 data URLs are supported")
    # Wrapped payloads carry line breaks; some clients also drop the padding.
    text = "".join(text.split())
    text += "=" * (-len(text) % 4)
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SignatureDecodeFailure(role, "payload is not valid base64") from exc


def to_transparent(raw: bytes, role: str, opacity: float = 1.0) -> Image.Image:
    """Open ``raw`` with Pillow and return an RGBA image scaled by ``opacity``."""

    try:
        with Image.open(BytesIO(raw)) as source:
            source.load()
            has_alpha = source.mode in ("RGBA", "LA", "PA") or "transparency" in source.info
            image = source.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise SignatureDecodeFailure(role, f"unreadable image: {exc}") from exc

    if has_alpha:
        alpha = image.getchannel("A")
    else:
        alpha = image.convert("L").point(lambda v: 0 if v >= WHITE_THRESHOLD else 255)
    if opacity < 1.0:
        alpha = alpha.point(lambda a: int(round(a * opacity)))
    image.putalpha(alpha)
    return image


def decode_signature(
    payload: str,
    role: str,
    opacity: float = 1.0,
    fetcher: Optional[SignatureFetcher] = None,
) -> Image.Image:
    if not isinstance(payload, str) or not payload.strip():
        raise SignatureDecodeFailure(role, "empty payload")
    image = to_transparent(payload_bytes(payload, role, fetcher), role, opacity)
    logger.debug("[signatures] decoded %s signature %sx%s", role, *image.size)
    return image


__all__ = [
    "DEFAULT_TIMEOUT",
    "SignatureFetcher",
    "decode_signature",
    "payload_bytes",
    "to_transparent",
]
