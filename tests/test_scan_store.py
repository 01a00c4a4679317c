from __future__ import annotations

import pytest

from core import EnrichedBundle, ScanPayload, ScanState, TargetProfile
from orchestrator import InMemoryProfileStore, InMemoryScanStore
from scoring import calculate_lsi
from utils.exceptions import AuthorizationError, NotFoundError


def _payload() -> ScanPayload:
    return ScanPayload(lsi=calculate_lsi(EnrichedBundle()))


def test_create_run_starts_pending_and_tracks_latest_per_target() -> None:
    store = InMemoryScanStore()
    first = store.create_run("tgt_1")
    second = store.create_run("tgt_1")

    assert first.state == ScanState.PENDING
    assert first.progress == 0
    assert first.run_id != second.run_id
    assert store.latest_run_for_target("tgt_1").run_id == second.run_id
    assert store.latest_run_for_target("tgt_unknown") is None


def test_progress_never_decreases() -> None:
    store = InMemoryScanStore()
    run_id = store.create_run("tgt_1").run_id
    store.mark_running(run_id, 10)
    store.update_progress(run_id, 65)
    store.update_progress(run_id, 55)

    assert store.get_run(run_id).progress == 65
    log = store.progress_log(run_id)
    assert log == sorted(log)


def test_complete_persists_payload_and_freezes_run() -> None:
    store = InMemoryScanStore()
    run_id = store.create_run("tgt_1").run_id
    store.mark_running(run_id)

    done = store.complete(run_id, _payload())
    assert done.state == ScanState.COMPLETED
    assert done.progress == 100
    assert done.timestamps.completed_at is not None
    assert store.get_payload(run_id).lsi.total == 30.0

    after = store.fail(run_id, "late failure")
    assert after.state == ScanState.COMPLETED
    assert after.error is None
    assert store.update_progress(run_id, 10).progress == 100


def test_fail_records_error() -> None:
    store = InMemoryScanStore()
    run_id = store.create_run("tgt_1").run_id
    failed = store.fail(run_id, "Scan canceled")

    assert failed.state == ScanState.FAILED
    assert failed.error == "Scan canceled"
    assert store.get_payload(run_id) is None


def test_request_cancel_only_flags_active_runs() -> None:
    store = InMemoryScanStore()
    run_id = store.create_run("tgt_1").run_id
    store.mark_running(run_id)

    assert store.request_cancel(run_id).cancellation_requested is True
    assert store.is_cancel_requested(run_id) is True
    assert store.request_cancel("scan_missing") is None


def test_snapshots_are_copies() -> None:
    store = InMemoryScanStore()
    run = store.create_run("tgt_1")
    run.progress = 99

    assert store.get_run(run.run_id).progress == 0


def test_profile_store_ownership_and_baseline() -> None:
    profiles = InMemoryProfileStore()
    target_id = profiles.add_target("user_1", TargetProfile(name="Ada Lovelace"))

    assert profiles.load_for_user(target_id, "user_1").name == "Ada Lovelace"
    with pytest.raises(AuthorizationError):
        profiles.load_for_user(target_id, "user_2")
    with pytest.raises(NotFoundError):
        profiles.load_for_user("tgt_missing", "user_1")

    assert profiles.get_baseline_lsi(target_id) is None
    assert profiles.set_baseline_lsi_if_unset(target_id, 42.5) is True
    assert profiles.set_baseline_lsi_if_unset(target_id, 60.0) is False
    assert profiles.get_baseline_lsi(target_id) == 42.5
