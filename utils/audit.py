from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlmodel import Field, Session, SQLModel, select


class AuditLog(SQLModel, table=True):
    __tablename__ = "audit_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    ts_utc: str
    action: str
    detail: Optional[str] = None


def now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def write_audit(session: Session, action: str, detail: Dict[str, Any] | None = None) -> AuditLog:
    """Stage an audit row on ``session``; the caller's commit persists it."""
    payload = json.dumps(detail, ensure_ascii=False, sort_keys=True) if detail is not None else None
    row = AuditLog(ts_utc=now_utc_iso(), action=action, detail=payload)
    session.add(row)
    return row


def fetch_last_audit_rows(session: Session, limit: int = 10) -> list[AuditLog]:
    statement = select(AuditLog).order_by(AuditLog.id.desc()).limit(limit)
    return list(session.exec(statement))


__all__ = ["AuditLog", "write_audit", "now_utc_iso", "fetch_last_audit_rows"]
