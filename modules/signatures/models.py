"""Signature placement geometry.

Rectangles are authored in a top-left origin space measured in PDF points,
which is how the on-screen positioning tool reports them.  Drawing happens in
PDF space (bottom-left origin), see :func:`to_draw_space`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

DEFAULT_OPACITY = 0.7

ROLES = ("client", "staff")


@dataclass(frozen=True, slots=True)
class SignatureRect:
    x: float
    y: float
    width: float
    height: float
    opacity: float = DEFAULT_OPACITY

    def problems(self, role: str = "signature") -> list[str]:
        issues: list[str] = []
        for name in ("x", "y", "width", "height", "opacity"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                issues.append(f"{role}.{name} must be a number")
            elif not math.isfinite(value):
                issues.append(f"{role}.{name} must be finite")
        if issues:
            return issues
        if self.width <= 0:
            issues.append(f"{role}.width must be greater than zero")
        if self.height <= 0:
            issues.append(f"{role}.height must be greater than zero")
        if not 0.0 <= self.opacity <= 1.0:
            issues.append(f"{role}.opacity must be between 0 and 1")
        return issues

    def to_dict(self) -> dict[str, float]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "opacity": self.opacity,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SignatureRect":
        if not isinstance(data, Mapping):
            raise TypeError(f"rectangle must be an object, not {type(data).__name__}")
        opacity = data.get("opacity")
        return cls(
            x=data.get("x"),
            y=data.get("y"),
            width=data.get("width"),
            height=data.get("height"),
            opacity=DEFAULT_OPACITY if opacity is None else opacity,
        )


@dataclass(frozen=True, slots=True)
class DualSignatureRects:
    client: SignatureRect
    staff: SignatureRect

    def problems(self) -> list[str]:
        return self.client.problems("client") + self.staff.problems("staff")

    def for_role(self, role: str) -> SignatureRect:
        return self.staff if role == "staff" else self.client

    def to_dict(self) -> dict[str, dict[str, float]]:
        return {"client": self.client.to_dict(), "staff": self.staff.to_dict()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DualSignatureRects":
        return cls(
            client=SignatureRect.from_dict(data["client"]),
            staff=SignatureRect.from_dict(data["staff"]),
        )


Geometry = SignatureRect | DualSignatureRects


def geometry_from_dict(data: Mapping[str, Any]) -> Geometry:
    """Rebuild a stored geometry; dual shapes carry ``client``/``staff`` keys."""

    if not isinstance(data, Mapping):
        raise TypeError(f"geometry must be an object, not {type(data).__name__}")
    if "client" in data or "staff" in data:
        return DualSignatureRects.from_dict(data)
    return SignatureRect.from_dict(data)


def to_draw_space(rect: SignatureRect, page_height: float) -> float:
    """Return the bottom-left origin ``y`` for ``rect`` on a page of ``page_height``."""

    return page_height - rect.y - rect.height


def from_draw_space(draw_y: float, height: float, page_height: float) -> float:
    """Inverse of :func:`to_draw_space`."""

    return page_height - draw_y - height


__all__ = [
    "DEFAULT_OPACITY",
    "DualSignatureRects",
    "Geometry",
    "ROLES",
    "SignatureRect",
    "from_draw_space",
    "geometry_from_dict",
    "to_draw_space",
]
