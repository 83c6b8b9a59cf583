"""Cover page for compiled job reports."""

from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Optional

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from modules.formfill.models import JobMetadata


def build_cover_page(job: JobMetadata, form_count: int, generated_at: Optional[datetime] = None) -> bytes:
    """Return a one page PDF naming the job, client, claim and form count."""

    generated_at = generated_at or datetime.now()
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=letter)
    c.setTitle(f"Job {job.job_id} report")
    c.setFont("Helvetica-Bold", 24)
    c.drawString(50, 750, "Job Report")
    c.setFont("Helvetica", 14)
    lines = (
        f"Job: {job.title or 'Unknown Job'}",
        f"Client: {job.client_name or 'N/A'}",
        f"Claim: {job.claim_number or 'N/A'}",
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M')}",
        f"Number of forms: {form_count}",
    )
    y = 700
    for line in lines:
        c.drawString(50, y, line)
        y -= 20
    c.showPage()
    c.save()
    return buffer.getvalue()


__all__ = ["build_cover_page"]
