"""Durable storage for signature geometry overrides."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from sqlmodel import Field, Session, SQLModel, create_engine, select

from utils.audit import AuditLog, fetch_last_audit_rows, now_utc_iso, write_audit

logger = logging.getLogger(__name__)


class SignaturePositionRow(SQLModel, table=True):
    __tablename__ = "signature_positions"

    form_type: str = Field(primary_key=True)
    geometry_json: str
    updated_at: Optional[str] = None


def get_engine(path: Path):
    path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{path}")
    SQLModel.metadata.create_all(engine)
    return engine


class SignaturePositionRepository:
    """Row per overridden form type; geometry kept as JSON."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._engine = get_engine(self.path)

    def load_all(self) -> dict[str, dict[str, Any]]:
        overrides: dict[str, dict[str, Any]] = {}
        with Session(self._engine) as session:
            for row in session.exec(select(SignaturePositionRow)):
                try:
                    overrides[row.form_type] = json.loads(row.geometry_json)
                except ValueError:
                    logger.warning("[signatures] ignoring unreadable override for %s", row.form_type)
        return overrides

    def save(self, form_type: str, geometry: dict[str, Any]) -> None:
        with Session(self._engine) as session:
            row = session.get(SignaturePositionRow, form_type)
            if row is None:
                row = SignaturePositionRow(form_type=form_type, geometry_json="{}")
            row.geometry_json = json.dumps(geometry, sort_keys=True)
            row.updated_at = now_utc_iso()
            session.add(row)
            write_audit(session, "signature_position.update", {"form_type": form_type, "geometry": geometry})
            session.commit()

    def delete(self, form_type: str) -> None:
        with Session(self._engine) as session:
            row = session.get(SignaturePositionRow, form_type)
            if row is not None:
                session.delete(row)
                write_audit(session, "signature_position.reset", {"form_type": form_type})
                session.commit()

    def audit_rows(self, limit: int = 10) -> list[AuditLog]:
        with Session(self._engine) as session:
            return fetch_last_audit_rows(session, limit)

    def dispose(self) -> None:
        self._engine.dispose()


__all__ = ["SignaturePositionRepository", "SignaturePositionRow", "get_engine"]
