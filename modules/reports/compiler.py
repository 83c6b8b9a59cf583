"""Compile the filled documents of one job into a single report.

A report is the cover page followed by every page of every submission that
filled successfully, in submission order.  A submission that fails for any
reason is logged and left out; compiling never fails because of one bad
submission.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from io import BytesIO
from typing import Callable, Optional, Sequence

from pypdf import PdfReader, PdfWriter

from modules.formfill.errors import FormFillError
from modules.formfill.models import FormSubmission, JobMetadata

from .cover import build_cover_page

logger = logging.getLogger(__name__)

FillFn = Callable[[FormSubmission], bytes]


class DocumentCompiler:
    def __init__(self, fill: FillFn, max_workers: int = 4) -> None:
        self._fill = fill
        self.max_workers = max(1, max_workers)

    def _safe_fill(self, submission: FormSubmission) -> Optional[bytes]:
        try:
            return self._fill(submission)
        except FormFillError as exc:
            logger.warning(
                "[reports] skipping submission %s (%s): %s",
                submission.id,
                submission.form_type,
                exc,
                extra={"submission_id": submission.id, "form_type": submission.form_type},
            )
        except Exception:
            logger.exception("[reports] unexpected failure filling submission %s", submission.id)
        return None

    def compile(
        self,
        job: JobMetadata,
        submissions: Sequence[FormSubmission],
        *,
        max_workers: Optional[int] = None,
        generated_at: Optional[datetime] = None,
        form_count: Optional[int] = None,
    ) -> bytes:
        """Return the compiled report for ``job``.

        Fills run concurrently in windows of ``max_workers`` so at most that
        many filled buffers are held before their pages are appended.  The cover
        counts ``form_count`` forms, defaulting to the submissions given.
        """

        workers = max(1, max_workers or self.max_workers)
        writer = PdfWriter()
        count = len(submissions) if form_count is None else form_count
        writer.append(PdfReader(BytesIO(build_cover_page(job, count, generated_at))))

        appended = 0
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="report-fill") as pool:
            for start in range(0, len(submissions), workers):
                window = submissions[start:start + workers]
                for submission, content in zip(window, pool.map(self._safe_fill, window)):
                    if content is None:
                        continue
                    try:
                        writer.append(PdfReader(BytesIO(content)), import_outline=False)
                    except Exception as exc:
                        logger.warning("[reports] could not append submission %s: %s", submission.id, exc)
                        continue
                    appended += 1

        buffer = BytesIO()
        writer.write(buffer)
        logger.info(
            "[reports] compiled job %s: %d of %d submissions, %d pages",
            job.job_id,
            appended,
            len(submissions),
            len(writer.pages),
        )
        return buffer.getvalue()


__all__ = ["DocumentCompiler", "FillFn"]
