from __future__ import annotations

import json
import threading

import pytest

from modules.formfill.errors import GeometryValidationFailure, UnsupportedFormType
from modules.signatures.models import DualSignatureRects, SignatureRect
from modules.signatures.repository import SignaturePositionRepository
from modules.signatures.store import DEFAULT_POSITIONS, FALLBACK_POSITION, SignaturePositionStore


def test_defaults_and_fallback():
    store = SignaturePositionStore()
    assert store.get("absa-form") == SignatureRect(74, 373, 200, 60)
    assert store.get_dual("absa-form") is None
    dual = store.get_dual("liability-form")
    assert dual.staff == SignatureRect(316, 663, 200, 60)
    assert store.get("liability-form") == dual.client
    assert store.get("timesheet-form") == FALLBACK_POSITION
    assert store.get_dual("timesheet-form") is None
    assert set(store.known_form_types()) == set(DEFAULT_POSITIONS)


def test_set_then_get_and_reset():
    store = SignaturePositionStore()
    updated = DualSignatureRects(client=SignatureRect(1, 2, 3, 4), staff=SignatureRect(5, 6, 7, 8, 1.0))
    store.set("material-list-form", updated)
    assert store.get_dual("material-list-form") == updated
    assert store.reset("material-list-form") == DEFAULT_POSITIONS["material-list-form"]
    assert store.get_dual("material-list-form") == DEFAULT_POSITIONS["material-list-form"]


def test_invalid_update_leaves_previous_geometry():
    store = SignaturePositionStore()
    before = store.get_dual("liability-form")
    bad = DualSignatureRects(client=SignatureRect(58, 670, 0, 60), staff=before.staff)
    with pytest.raises(GeometryValidationFailure) as excinfo:
        store.set("liability-form", bad)
    assert excinfo.value.problems == ["client.width must be greater than zero"]
    assert store.get_dual("liability-form") == before


def test_single_form_rejects_dual_shape_and_vice_versa():
    store = SignaturePositionStore()
    dual = DEFAULT_POSITIONS["liability-form"]
    with pytest.raises(GeometryValidationFailure):
        store.set("absa-form", dual)
    with pytest.raises(GeometryValidationFailure):
        store.set("liability-form", SignatureRect(1, 2, 3, 4))


def test_unknown_form_type_cannot_be_written():
    store = SignaturePositionStore()
    with pytest.raises(UnsupportedFormType):
        store.set("timesheet-form", SignatureRect(1, 2, 3, 4))
    with pytest.raises(UnsupportedFormType):
        store.reset("timesheet-form")


def test_overrides_survive_restart(tmp_path):
    path = tmp_path / "positions.db"
    store = SignaturePositionStore(SignaturePositionRepository(path))
    store.set("absa-form", SignatureRect(10, 20, 30, 40, 0.5))
    store.set("sahl-certificate-form", SignatureRect(1, 1, 1, 1))

    reloaded = SignaturePositionStore(SignaturePositionRepository(path))
    assert reloaded.get("absa-form") == SignatureRect(10, 20, 30, 40, 0.5)

    reloaded.reset("sahl-certificate-form")
    again = SignaturePositionStore(SignaturePositionRepository(path))
    assert again.get("sahl-certificate-form") == DEFAULT_POSITIONS["sahl-certificate-form"]
    assert again.get("absa-form") == SignatureRect(10, 20, 30, 40, 0.5)


def test_position_changes_are_audited(tmp_path):
    repository = SignaturePositionRepository(tmp_path / "positions.db")
    store = SignaturePositionStore(repository)
    store.set("absa-form", SignatureRect(10, 20, 30, 40))
    store.reset("absa-form")
    rows = repository.audit_rows()
    assert [row.action for row in rows] == ["signature_position.reset", "signature_position.update"]
    assert json.loads(rows[1].detail)["geometry"]["width"] == 30


def test_invalid_stored_overrides_are_ignored(tmp_path):
    repository = SignaturePositionRepository(tmp_path / "positions.db")
    repository.save("absa-form", {"x": 1, "y": 2, "width": -5, "height": 4})
    repository.save("liability-form", {"x": 1, "y": 2, "width": 5, "height": 4})
    repository.save("timesheet-form", {"x": 1, "y": 2, "width": 5, "height": 4})
    repository.save("discovery-form", {"client": None, "staff": {"x": 1, "y": 2, "width": 5, "height": 4}})
    repository.save("sahl-certificate-form", [1, 2, 5, 4])
    store = SignaturePositionStore(repository)
    assert store.get("absa-form") == DEFAULT_POSITIONS["absa-form"]
    assert store.get_dual("liability-form") == DEFAULT_POSITIONS["liability-form"]
    assert store.get_dual("discovery-form") == DEFAULT_POSITIONS["discovery-form"]
    assert store.get("sahl-certificate-form") == DEFAULT_POSITIONS["sahl-certificate-form"]
    assert "timesheet-form" not in store.all()


def test_readers_never_see_partial_updates():
    store = SignaturePositionStore()
    first = DualSignatureRects(client=SignatureRect(1, 1, 10, 10), staff=SignatureRect(1, 1, 10, 10))
    second = DualSignatureRects(client=SignatureRect(2, 2, 20, 20), staff=SignatureRect(2, 2, 20, 20))
    store.set("discovery-form", first)
    seen: list[DualSignatureRects] = []
    stop = threading.Event()

    def reader():
        while True:
            seen.append(store.get_dual("discovery-form"))
            if stop.is_set():
                break

    def writer():
        for index in range(200):
            store.set("discovery-form", second if index % 2 else first)

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for thread in threads:
        thread.start()
    writer()
    stop.set()
    for thread in threads:
        thread.join()
    assert seen
    assert all(geometry in (first, second) for geometry in seen)
