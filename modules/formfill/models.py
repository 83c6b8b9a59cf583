from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True, slots=True)
class FormSubmission:
    """A submitted wizard form as handed over by the submission store."""

    id: str
    job_id: str
    form_type: str
    data: Dict[str, Any] = field(default_factory=dict)
    signature: Optional[str] = None
    signature_staff: Optional[str] = None
    submitted_at: Optional[str] = None
    submitted_by: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormSubmission":
        return cls(
            id=str(data["id"]),
            job_id=str(data.get("job_id") or data.get("jobId") or ""),
            form_type=data.get("form_type") or data.get("formType") or data.get("formId") or "",
            data=dict(data.get("data") or {}),
            signature=data.get("signature"),
            signature_staff=data.get("signature_staff"),
            submitted_at=data.get("submitted_at") or data.get("submittedAt"),
            submitted_by=data.get("submitted_by") or data.get("submittedBy"),
        )


@dataclass(frozen=True, slots=True)
class JobMetadata:
    job_id: str
    title: str = ""
    client_name: str = ""
    claim_number: str = ""


@dataclass(slots=True)
class FillResult:
    """Outcome of filling one submission: bytes or a typed error."""

    submission_id: str
    form_type: str
    content: Optional[bytes] = None
    error: Optional[Exception] = None
    filename: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None and self.content is not None


__all__ = ["FillResult", "FormSubmission", "JobMetadata"]
