"""Facade tying the registry, filler, signature store and compiler together."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any, Optional, Sequence

from modules.reports.compiler import DocumentCompiler
from modules.signatures.compositing import SignatureSet
from modules.signatures.decode import SignatureFetcher
from modules.signatures.models import DualSignatureRects, Geometry, SignatureRect
from modules.signatures.repository import SignaturePositionRepository
from modules.signatures.store import SignaturePositionStore
from utils.settings import FormFillSettings, load_settings

from .errors import FormFillError
from .filler import DocumentFiller, FilledDocument
from .models import FillResult, FormSubmission, JobMetadata
from .normalize import merge_with_fallback
from .registry import canonical_form_type, get_entry, is_supported
from .submissions import InMemorySubmissionStore, SubmissionStore
from .templates import DirectoryTemplateProvider, TemplateProvider

_LOGGER = logging.getLogger(__name__)

LEGACY_SIGNATURE_KEYS = ("signature", "field-signature", "field-signature-absa", "field-signature-sahl")


def signatures_for(submission: FormSubmission) -> SignatureSet:
    """Collect signature payloads, honouring the legacy in-data signature keys."""

    legacy = next(
        (submission.data.get(key) for key in LEGACY_SIGNATURE_KEYS if isinstance(submission.data.get(key), str)),
        None,
    )
    return SignatureSet(
        client=submission.signature or None,
        staff=submission.signature_staff or None,
        legacy=legacy or None,
    )


def download_filename(form_type: str, job_id: str = "") -> str:
    entry = get_entry(form_type)
    suffix = re.sub(r"[^A-Za-z0-9_-]+", "-", job_id).strip("-")
    return f"{entry.download_name}_{suffix}.pdf" if suffix else f"{entry.download_name}.pdf"


def compiled_filename(job_id: str) -> str:
    return f"job-{job_id}-compiled-report.pdf"


class FormFillService:
    """Entry point used by the HTTP layer and by host applications."""

    def __init__(
        self,
        *,
        settings: Optional[FormFillSettings] = None,
        templates: Optional[TemplateProvider] = None,
        positions: Optional[SignaturePositionStore] = None,
        submissions: Optional[SubmissionStore] = None,
        fetcher: Optional[SignatureFetcher] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.templates = templates or DirectoryTemplateProvider(self.settings.template_dir)
        if positions is None:
            positions = SignaturePositionStore(SignaturePositionRepository(self.settings.database_path))
        self.positions = positions
        self.submissions = submissions if submissions is not None else InMemorySubmissionStore()
        self.fetcher = fetcher or SignatureFetcher(timeout=self.settings.fetch_timeout)
        self.filler = DocumentFiller(
            self.templates,
            self.positions,
            fetcher=self.fetcher,
            summary_fallback=self.settings.summary_fallback,
            signature_labels=self.settings.signature_labels,
        )
        self.compiler = DocumentCompiler(self._fill_bytes, max_workers=self.settings.compile_workers)

    # ---- single documents ---------------------------------------------
    def merged_data(self, submission: FormSubmission, today: Optional[date] = None) -> dict[str, Any]:
        return merge_with_fallback(
            submission.data,
            get_entry(submission.form_type).form_type,
            today=today,
            placeholders=self.settings.placeholders,
        )

    def render(self, submission: FormSubmission, *, flatten: Optional[bool] = None, today: Optional[date] = None) -> FilledDocument:
        """Fill ``submission``; typed errors propagate to the caller."""

        merged = self.merged_data(submission, today)
        return self.filler.fill_document(
            submission.form_type,
            merged,
            signatures_for(submission),
            flatten=flatten,
            today=today,
        )

    def _fill_bytes(self, submission: FormSubmission) -> bytes:
        return self.render(submission).content

    def fill_single_document(self, submission: FormSubmission, *, flatten: Optional[bool] = None) -> FillResult:
        """Fill one submission and return bytes or the typed error that stopped it."""

        result = FillResult(submission_id=submission.id, form_type=submission.form_type)
        try:
            result.content = self.render(submission, flatten=flatten).content
            result.filename = download_filename(submission.form_type, submission.job_id)
        except FormFillError as exc:
            _LOGGER.warning("[formfill] could not fill submission %s: %s", submission.id, exc)
            result.error = exc
        except Exception as exc:
            _LOGGER.exception("[formfill] unexpected failure filling submission %s", submission.id)
            result.error = exc
        return result

    # ---- compiled reports ---------------------------------------------
    def compile_job_report(
        self,
        job_id: str,
        submission_ids: Sequence[str],
        job: Optional[JobMetadata] = None,
        *,
        max_workers: Optional[int] = None,
    ) -> bytes:
        job = job or JobMetadata(job_id=job_id)
        found: list[FormSubmission] = []
        for submission_id in submission_ids:
            submission = self.submissions.get(submission_id)
            if submission is None:
                _LOGGER.warning("[formfill] submission %s not found for job %s", submission_id, job_id)
                continue
            found.append(submission)
        return self.compiler.compile(job, found, max_workers=max_workers, form_count=len(submission_ids))

    # ---- signature positions ------------------------------------------
    def get_signature_position(self, form_type: str) -> SignatureRect:
        return self.positions.get(canonical_form_type(form_type))

    def get_dual_signature_positions(self, form_type: str) -> Optional[DualSignatureRects]:
        return self.positions.get_dual(canonical_form_type(form_type))

    def set_signature_position(self, form_type: str, geometry: Geometry) -> Geometry:
        return self.positions.set(canonical_form_type(form_type), geometry)

    def reset_signature_position(self, form_type: str) -> Geometry:
        return self.positions.reset(canonical_form_type(form_type))

    # ---- registry -----------------------------------------------------
    @staticmethod
    def supports(form_type: str) -> bool:
        return is_supported(form_type)

    def close(self) -> None:
        self.fetcher.close()


__all__ = [
    "FormFillService",
    "compiled_filename",
    "download_filename",
    "signatures_for",
]
