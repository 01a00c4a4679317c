"""In-memory stores for scan runs, payloads and target profiles."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional, Tuple
from uuid import uuid4

from core import LSIResult, ScanPayload, ScanRun, ScanState, TargetProfile
from utils.exceptions import AuthorizationError, NotFoundError


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_run_id() -> str:
    return f"scan_{_utcnow().strftime('%Y%m%d_%H%M%S')}_{uuid4().hex[:8]}"


class InMemoryScanStore:
    """
    Thread-safe store for scan run status, final payloads and LSI history.

    Terminal runs are frozen: once a run is completed or failed, further
    progress or state updates are ignored. Progress never decreases.
    """

    def __init__(self) -> None:
        self._runs: Dict[str, ScanRun] = {}
        self._payloads: Dict[str, ScanPayload] = {}
        self._latest_by_target: Dict[str, str] = {}
        self._progress_log: Dict[str, List[int]] = {}
        self._lsi_history: Dict[str, List[Tuple[datetime, float]]] = {}
        self._lock = Lock()

    def create_run(self, target_id: str) -> ScanRun:
        with self._lock:
            run_id = _new_run_id()
            run = ScanRun(run_id=run_id, target_id=target_id)
            self._runs[run_id] = run
            self._latest_by_target[target_id] = run_id
            self._progress_log[run_id] = [0]
            return run.model_copy(deep=True)

    def get_run(self, run_id: str) -> Optional[ScanRun]:
        with self._lock:
            run = self._runs.get(run_id)
            return run.model_copy(deep=True) if run else None

    def latest_run_for_target(self, target_id: str) -> Optional[ScanRun]:
        with self._lock:
            run_id = self._latest_by_target.get(target_id)
            run = self._runs.get(run_id) if run_id else None
            return run.model_copy(deep=True) if run else None

    def get_payload(self, run_id: str) -> Optional[ScanPayload]:
        with self._lock:
            payload = self._payloads.get(run_id)
            return payload.model_copy(deep=True) if payload else None

    def progress_log(self, run_id: str) -> List[int]:
        """Every progress value the run has reported, in order."""
        with self._lock:
            return list(self._progress_log.get(run_id, []))

    def _mutable(self, run_id: str) -> Optional[ScanRun]:
        run = self._runs.get(run_id)
        if run is None:
            return None
        if run.state.is_terminal:
            logger.warning(f"Ignoring update for terminal run {run_id} ({run.state.value})")
            return None
        return run

    def _set_progress(self, run: ScanRun, progress: int) -> None:
        run.progress = max(run.progress, max(0, min(100, int(progress))))
        run.timestamps.updated_at = _utcnow()
        self._progress_log.setdefault(run.run_id, []).append(run.progress)

    def mark_running(self, run_id: str, progress: int = 10) -> Optional[ScanRun]:
        with self._lock:
            run = self._mutable(run_id)
            if run is None:
                return self._snapshot(run_id)
            run.state = ScanState.RUNNING
            run.timestamps.started_at = run.timestamps.started_at or _utcnow()
            self._set_progress(run, progress)
            return run.model_copy(deep=True)

    def update_progress(self, run_id: str, progress: int) -> Optional[ScanRun]:
        with self._lock:
            run = self._mutable(run_id)
            if run is None:
                return self._snapshot(run_id)
            self._set_progress(run, progress)
            return run.model_copy(deep=True)

    def complete(self, run_id: str, payload: ScanPayload) -> Optional[ScanRun]:
        """Persist the final payload and mark the run completed at 100."""
        with self._lock:
            run = self._mutable(run_id)
            if run is None:
                return self._snapshot(run_id)
            self._payloads[run_id] = payload.model_copy(deep=True)
            run.state = ScanState.COMPLETED
            self._set_progress(run, 100)
            run.timestamps.completed_at = run.timestamps.updated_at
            return run.model_copy(deep=True)

    def fail(self, run_id: str, error: str) -> Optional[ScanRun]:
        with self._lock:
            run = self._mutable(run_id)
            if run is None:
                return self._snapshot(run_id)
            now = _utcnow()
            run.state = ScanState.FAILED
            run.error = str(error or "Scan failed")
            run.timestamps.completed_at = now
            run.timestamps.updated_at = now
            return run.model_copy(deep=True)

    def request_cancel(self, run_id: str) -> Optional[ScanRun]:
        with self._lock:
            run = self._runs.get(run_id)
            if run is None:
                return None
            if not run.state.is_terminal:
                run.cancellation_requested = True
                run.timestamps.updated_at = _utcnow()
            return run.model_copy(deep=True)

    def is_cancel_requested(self, run_id: str) -> bool:
        with self._lock:
            run = self._runs.get(run_id)
            return bool(run and run.cancellation_requested)

    def append_lsi_history(self, target_id: str, lsi: LSIResult) -> None:
        with self._lock:
            self._lsi_history.setdefault(target_id, []).append((_utcnow(), lsi.total))

    def get_lsi_history(self, target_id: str) -> List[Tuple[datetime, float]]:
        with self._lock:
            return list(self._lsi_history.get(target_id, []))

    def _snapshot(self, run_id: str) -> Optional[ScanRun]:
        run = self._runs.get(run_id)
        return run.model_copy(deep=True) if run else None


class InMemoryProfileStore:
    """Target profiles with their owners and the first LSI ever recorded."""

    def __init__(self) -> None:
        self._profiles: Dict[str, TargetProfile] = {}
        self._owners: Dict[str, str] = {}
        self._baseline_lsi: Dict[str, float] = {}
        self._lock = Lock()

    def add_target(self, owner_id: str, profile: TargetProfile, target_id: Optional[str] = None) -> str:
        target_id = target_id or f"tgt_{uuid4().hex[:10]}"
        with self._lock:
            self._profiles[target_id] = profile
            self._owners[target_id] = str(owner_id)
        return target_id

    def get_profile(self, target_id: str) -> TargetProfile:
        with self._lock:
            profile = self._profiles.get(target_id)
        if profile is None:
            raise NotFoundError(f"Target not found: {target_id}", {"target_id": target_id})
        return profile

    def load_for_user(self, target_id: str, user_id: str) -> TargetProfile:
        """
        Load a profile on behalf of a user.

        Raises:
            NotFoundError: unknown target
            AuthorizationError: the user does not own the target
        """
        profile = self.get_profile(target_id)
        with self._lock:
            owner = self._owners.get(target_id)
        if owner != str(user_id):
            raise AuthorizationError(
                f"User {user_id} does not own target {target_id}",
                {"target_id": target_id},
            )
        return profile

    def set_baseline_lsi_if_unset(self, target_id: str, total: float) -> bool:
        with self._lock:
            if target_id in self._baseline_lsi:
                return False
            self._baseline_lsi[target_id] = float(total)
            return True

    def get_baseline_lsi(self, target_id: str) -> Optional[float]:
        with self._lock:
            return self._baseline_lsi.get(target_id)
