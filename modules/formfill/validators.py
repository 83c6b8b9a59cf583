"""Pydantic schemas for form filling REST payloads."""

from __future__ import annotations

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.signatures.models import DualSignatureRects, Geometry, SignatureRect


class RectPayload(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    x: float
    y: float
    width: float
    height: float
    opacity: float = 0.7

    @field_validator("x", "y", "width", "height", "opacity")
    @classmethod
    def finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
        return value

    def to_rect(self) -> SignatureRect:
        return SignatureRect(
            x=self.x, y=self.y, width=self.width, height=self.height, opacity=self.opacity
        )


class PositionUpdate(BaseModel):
    """Either a single rectangle (``position``) or ``client``/``staff`` rectangles.

    Range checks (positive size, opacity bounds) happen in the store so the
    API and Python callers are rejected the same way.
    """

    position: Optional[RectPayload] = None
    client: Optional[RectPayload] = None
    staff: Optional[RectPayload] = None

    @model_validator(mode="after")
    def one_shape(self) -> "PositionUpdate":
        if self.position is None and self.client is None and self.staff is None:
            raise ValueError("position or client/staff rectangles are required")
        if self.position is not None and (self.client is not None or self.staff is not None):
            raise ValueError("send either position or client/staff, not both")
        return self

    def to_geometry(self) -> Geometry | None:
        """Return the geometry or ``None`` when a dual role is missing."""

        if self.position is not None:
            return self.position.to_rect()
        if self.client is None or self.staff is None:
            return None
        return DualSignatureRects(client=self.client.to_rect(), staff=self.staff.to_rect())


class PositionRead(BaseModel):
    form_type: str
    is_dual: bool
    position: RectPayload
    positions: Optional[dict[str, RectPayload]] = None

    @classmethod
    def from_geometry(cls, form_type: str, single: SignatureRect, dual: DualSignatureRects | None) -> "PositionRead":
        return cls(
            form_type=form_type,
            is_dual=dual is not None,
            position=RectPayload.model_validate(single),
            positions=(
                {
                    "client": RectPayload.model_validate(dual.client),
                    "staff": RectPayload.model_validate(dual.staff),
                }
                if dual is not None
                else None
            ),
        )


class CompileRequest(BaseModel):
    submission_ids: list[str] = Field(default_factory=list)
    job_title: str = ""
    client_name: str = ""
    claim_number: str = ""
    max_workers: Optional[int] = Field(default=None, ge=1, le=16)


class FormTypeRead(BaseModel):
    form_type: str
    title: str
    template: str
    flatten: bool
    dual_signature: bool
    rules: list[str]
    fields: list[str]
