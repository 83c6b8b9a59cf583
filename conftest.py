from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from modules.formfill.models import FormSubmission  # noqa: E402
from modules.formfill.service import FormFillService  # noqa: E402
from modules.formfill.submissions import InMemorySubmissionStore  # noqa: E402
from modules.signatures.store import SignaturePositionStore  # noqa: E402
from tests.pdf_helpers import build_registry_templates, signature_data_url  # noqa: E402
from utils.settings import FormFillSettings  # noqa: E402


@pytest.fixture
def template_dir(tmp_path) -> Path:
    return build_registry_templates(tmp_path / "templates")


@pytest.fixture
def signature_url() -> str:
    return signature_data_url()


@pytest.fixture
def settings(tmp_path, template_dir) -> FormFillSettings:
    return FormFillSettings(data_dir=tmp_path / "data", template_dir=template_dir)


@pytest.fixture
def positions() -> SignaturePositionStore:
    return SignaturePositionStore()


@pytest.fixture
def service(settings, positions):
    svc = FormFillService(settings=settings, positions=positions, submissions=InMemorySubmissionStore())
    yield svc
    svc.close()


@pytest.fixture
def make_submission():
    counter = {"n": 0}

    def factory(form_type: str, data: dict | None = None, **kwargs) -> FormSubmission:
        counter["n"] += 1
        kwargs.setdefault("id", f"sub-{counter['n']}")
        kwargs.setdefault("job_id", "job-1")
        return FormSubmission(form_type=form_type, data=dict(data or {}), **kwargs)

    return factory
