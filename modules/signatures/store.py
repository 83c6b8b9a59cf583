"""Process-wide signature placement configuration.

The store keeps one geometry per form type.  Built-in defaults are static;
administrative overrides are written through to a
:class:`~modules.signatures.repository.SignaturePositionRepository` and loaded
again on start-up, so the in-memory mapping is only a read-through cache.

Writers build a complete replacement mapping and publish it with a single
reference assignment.  Readers grab the current mapping once and never see a
partially updated entry.
"""

from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Any, Mapping, Optional

from modules.formfill.errors import GeometryValidationFailure, UnsupportedFormType

from .models import DualSignatureRects, Geometry, SignatureRect, geometry_from_dict
from .repository import SignaturePositionRepository

logger = logging.getLogger(__name__)

FALLBACK_POSITION = SignatureRect(x=400, y=100, width=200, height=60, opacity=0.7)


def _dual(client: tuple[float, float, float, float], staff: tuple[float, float, float, float]) -> DualSignatureRects:
    return DualSignatureRects(client=SignatureRect(*client), staff=SignatureRect(*staff))


DEFAULT_POSITIONS: Mapping[str, Geometry] = MappingProxyType(
    {
        "absa-form": SignatureRect(74, 373, 200, 60),
        "sahl-certificate-form": SignatureRect(71, 586, 200, 60),
        "clearance-certificate-form": _dual(
            (91.0330810546875, 683.6632232666016, 200, 60),
            (87.97, 682.24, 200, 60),
        ),
        "discovery-form": _dual((120, 163, 180, 50), (223.97, 797.24, 175, 40)),
        "liability-form": _dual((58, 670, 200, 60), (316, 663, 200, 60)),
        "noncompliance-form": _dual((300, 700, 200, 60), (80, 700, 200, 60)),
        "material-list-form": _dual((320, 750, 200, 60), (80, 750, 200, 60)),
    }
)


class SignaturePositionStore:
    """Read/update/reset signature geometry keyed by form type."""

    def __init__(
        self,
        repository: Optional[SignaturePositionRepository] = None,
        defaults: Mapping[str, Geometry] = DEFAULT_POSITIONS,
    ) -> None:
        self._defaults = dict(defaults)
        self._repository = repository
        self._write_lock = threading.Lock()
        positions = dict(self._defaults)
        if repository is not None:
            positions.update(self._load_overrides(repository))
        self._positions: Mapping[str, Geometry] = MappingProxyType(positions)

    def _load_overrides(self, repository: SignaturePositionRepository) -> dict[str, Geometry]:
        loaded: dict[str, Geometry] = {}
        for form_type, raw in repository.load_all().items():
            if form_type not in self._defaults:
                logger.warning("[signatures] ignoring override for unknown form type %s", form_type)
                continue
            try:
                geometry = geometry_from_dict(raw)
                self._validate(form_type, geometry)
            except (KeyError, TypeError, GeometryValidationFailure) as exc:
                logger.warning("[signatures] ignoring stored override for %s: %s", form_type, exc)
                continue
            loaded[form_type] = geometry
        return loaded

    # ---- reads --------------------------------------------------------
    def known_form_types(self) -> list[str]:
        return list(self._defaults)

    def is_dual(self, form_type: str) -> bool:
        return isinstance(self._defaults.get(form_type), DualSignatureRects)

    def get(self, form_type: str) -> SignatureRect:
        """Return the single rectangle for ``form_type``.

        Dual entries answer with their client rectangle and unknown form types
        with :data:`FALLBACK_POSITION`.
        """

        geometry = self._positions.get(form_type)
        if geometry is None:
            return FALLBACK_POSITION
        if isinstance(geometry, DualSignatureRects):
            return geometry.client
        return geometry

    def get_dual(self, form_type: str) -> Optional[DualSignatureRects]:
        geometry = self._positions.get(form_type)
        if isinstance(geometry, DualSignatureRects):
            return geometry
        return None

    def all(self) -> dict[str, Geometry]:
        return dict(self._positions)

    # ---- writes -------------------------------------------------------
    def set(self, form_type: str, geometry: Geometry) -> Geometry:
        """Replace the stored geometry for ``form_type`` as a whole."""

        if form_type not in self._defaults:
            raise UnsupportedFormType(form_type)
        self._validate(form_type, geometry)
        with self._write_lock:
            updated = dict(self._positions)
            updated[form_type] = geometry
            if self._repository is not None:
                self._repository.save(form_type, geometry.to_dict())
            self._positions = MappingProxyType(updated)
        logger.info("[signatures] updated position for %s", form_type)
        return geometry

    def reset(self, form_type: str) -> Geometry:
        if form_type not in self._defaults:
            raise UnsupportedFormType(form_type)
        default = self._defaults[form_type]
        with self._write_lock:
            updated = dict(self._positions)
            updated[form_type] = default
            if self._repository is not None:
                self._repository.delete(form_type)
            self._positions = MappingProxyType(updated)
        logger.info("[signatures] reset position for %s", form_type)
        return default

    def _validate(self, form_type: str, geometry: Any) -> None:
        if self.is_dual(form_type):
            if not isinstance(geometry, DualSignatureRects):
                raise GeometryValidationFailure(
                    form_type, ["client and staff rectangles are required for this form type"]
                )
            problems = geometry.problems()
        elif isinstance(geometry, SignatureRect):
            problems = geometry.problems()
        else:
            problems = ["a single rectangle is required for this form type"]
        if problems:
            raise GeometryValidationFailure(form_type, problems)


__all__ = ["DEFAULT_POSITIONS", "FALLBACK_POSITION", "SignaturePositionStore"]
