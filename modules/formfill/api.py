"""FastAPI routes for filled documents, compiled reports and signature positions."""

from __future__ import annotations

from functools import lru_cache
from io import BytesIO

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse, StreamingResponse

from .errors import GeometryValidationFailure, TemplateResourceUnavailable, UnsupportedFormType
from .models import JobMetadata
from .registry import list_entries, template_fields
from .rules import describe
from .service import FormFillService, compiled_filename
from .validators import CompileRequest, FormTypeRead, PositionRead, PositionUpdate

router = APIRouter(prefix="/api/formfill", tags=["formfill"])


@lru_cache(maxsize=1)
def get_service() -> FormFillService:
    return FormFillService()


def _pdf_response(content: bytes, filename: str) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(content),
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def _position(service: FormFillService, form_type: str) -> PositionRead:
    return PositionRead.from_geometry(
        form_type,
        service.get_signature_position(form_type),
        service.get_dual_signature_positions(form_type),
    )


@router.get("/forms", response_model=list[FormTypeRead])
def list_forms() -> list[FormTypeRead]:
    return [
        FormTypeRead(
            form_type=entry.form_type,
            title=entry.title,
            template=entry.template,
            flatten=entry.flatten,
            dual_signature=entry.dual_signature,
            rules=[describe(rule) for rule in entry.rules],
            fields=template_fields(entry),
        )
        for entry in list_entries()
    ]


@router.get("/submissions/{submission_id}/pdf")
def submission_pdf(submission_id: str, service: FormFillService = Depends(get_service)) -> Response:
    submission = service.submissions.get(submission_id)
    if submission is None:
        raise HTTPException(status_code=404, detail="Submission not found")
    result = service.fill_single_document(submission)
    if isinstance(result.error, UnsupportedFormType):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "unsupported_form_type",
                "form_type": submission.form_type,
                "message": f"PDF generation is not supported for form type {submission.form_type}.",
            },
        )
    if isinstance(result.error, TemplateResourceUnavailable):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "error": "template_unavailable",
                "form_type": submission.form_type,
                "message": "The template for this form is currently unavailable.",
            },
        )
    if not result.ok:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "generation_failed", "message": "Failed to generate PDF."},
        )
    return _pdf_response(result.content, result.filename)


@router.post("/jobs/{job_id}/compiled-pdf")
def compiled_pdf(job_id: str, payload: CompileRequest, service: FormFillService = Depends(get_service)) -> Response:
    if not payload.submission_ids:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "no_submissions", "message": "No submission IDs provided."},
        )
    job = JobMetadata(
        job_id=job_id,
        title=payload.job_title,
        client_name=payload.client_name,
        claim_number=payload.claim_number,
    )
    content = service.compile_job_report(job_id, payload.submission_ids, job, max_workers=payload.max_workers)
    return _pdf_response(content, compiled_filename(job_id))


@router.get("/signature-positions", response_model=list[PositionRead])
def list_positions(service: FormFillService = Depends(get_service)) -> list[PositionRead]:
    return [_position(service, form_type) for form_type in service.positions.known_form_types()]


@router.get("/signature-positions/{form_type}", response_model=PositionRead)
def get_position(form_type: str, service: FormFillService = Depends(get_service)) -> PositionRead:
    return _position(service, form_type)


@router.put("/signature-positions/{form_type}", response_model=PositionRead)
def update_position(
    form_type: str,
    payload: PositionUpdate,
    service: FormFillService = Depends(get_service),
) -> Response:
    try:
        service.set_signature_position(form_type, payload.to_geometry())
    except UnsupportedFormType:
        raise HTTPException(status_code=404, detail="Unknown form type")
    except GeometryValidationFailure as exc:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"error": "invalid_geometry", "problems": exc.problems, "message": str(exc)},
        )
    return _position(service, form_type)


@router.post("/signature-positions/{form_type}/reset", response_model=PositionRead)
def reset_position(form_type: str, service: FormFillService = Depends(get_service)) -> PositionRead:
    try:
        service.reset_signature_position(form_type)
    except UnsupportedFormType:
        raise HTTPException(status_code=404, detail="Unknown form type")
    return _position(service, form_type)


__all__ = ["get_service", "router"]
