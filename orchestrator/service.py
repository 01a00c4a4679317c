"""Scan orchestrator: lifecycle, fan-out, enrichment, scoring and persistence."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

import httpx

from aggregator import aggregate, rank_results
from config import Settings, get_settings
from core import (
    EnrichedBundle,
    LSIResult,
    ModuleResult,
    ModuleSummary,
    ScanPayload,
    ScanRun,
    ScanState,
    TargetProfile,
)
from intelligence import EnrichmentPipeline
from scoring import calculate_lsi
from sources import SourceModule, build_source_modules
from utils.exceptions import NotFoundError, OrchestrationFault

from .store import InMemoryProfileStore, InMemoryScanStore


logger = logging.getLogger(__name__)


CANCELED_MESSAGE = "Scan canceled"

# Progress checkpoints reported as each phase finishes
PROGRESS_STARTED = 10
PROGRESS_SOURCES_DONE = 55
PROGRESS_AGGREGATED = 65
PROGRESS_ENRICHED = 85
PROGRESS_SCORED = 95


class ScanCanceled(Exception):
    """Raised at a phase boundary once cancellation was requested."""


def build_payload(
    bundle: EnrichedBundle,
    lsi: LSIResult,
    module_results: Sequence[ModuleResult],
    deduplicated_count: Optional[int] = None,
) -> ScanPayload:
    return ScanPayload(
        total_mentions=bundle.total_mentions,
        sentiment_summary=bundle.sentiment,
        frame_distribution=dict(bundle.frames),
        top_keywords=list(bundle.top_keywords),
        narrative_summary=bundle.summary,
        archetype_hints=list(bundle.archetype_hints),
        crisis_signals=list(bundle.crisis_signals),
        mentions=list(bundle.results),
        deduplicated_count=len(bundle.results) if deduplicated_count is None else deduplicated_count,
        module_summary={
            module.module: ModuleSummary(
                count=len(module.results),
                sources_scanned=module.sources_scanned,
                duration_ms=module.duration_ms,
                errors=list(module.errors),
            )
            for module in module_results
        },
        lsi=lsi,
    )


def scan_view(run: ScanRun, payload: Optional[ScanPayload], *, full: bool, preview: int) -> Dict[str, Any]:
    """JSON-ready run status plus payload; mentions are truncated unless ``full``."""
    view = run.model_dump(mode="json")
    if payload is None:
        view["payload"] = None
        return view
    data = payload.model_dump(mode="json")
    if not full:
        data["mentions"] = data["mentions"][:preview]
    view["payload"] = data
    return view


class ScanOrchestrator:
    """
    Runs one scan per request in the background and exposes polling views.

    ``modules`` may be injected (tests, custom source sets); otherwise the
    seven domain modules are rebuilt for every scan around one shared
    HTTP client that is closed when the scan ends.
    """

    def __init__(
        self,
        *,
        scan_store: Optional[InMemoryScanStore] = None,
        profile_store: Optional[InMemoryProfileStore] = None,
        modules: Optional[Sequence[SourceModule]] = None,
        enrichment: Optional[EnrichmentPipeline] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.scan_store = scan_store or InMemoryScanStore()
        self.profile_store = profile_store or InMemoryProfileStore()
        self._modules = list(modules) if modules is not None else None
        self._enrichment = enrichment
        self._tasks: Set[asyncio.Task] = set()

    @property
    def enrichment(self) -> EnrichmentPipeline:
        if self._enrichment is None:
            self._enrichment = EnrichmentPipeline.from_settings(self.settings)
        return self._enrichment

    def prepare_scan(self, target_id: str, user_id: str) -> Tuple[ScanRun, TargetProfile]:
        """Authorize, create the run and mark it running without executing it."""
        profile = self.profile_store.load_for_user(target_id, user_id)
        run = self.scan_store.create_run(target_id)
        run = self.scan_store.mark_running(run.run_id, PROGRESS_STARTED)
        logger.info(f"Scan {run.run_id} started for target {target_id}")
        return run, profile

    async def start_scan(self, target_id: str, user_id: str) -> ScanRun:
        """
        Create a run for an owned target and execute it in the background.

        Returns as soon as the run is marked running.

        Raises:
            NotFoundError: unknown target
            AuthorizationError: the user does not own the target
        """
        run, profile = self.prepare_scan(target_id, user_id)
        task = asyncio.create_task(self.run_scan(run.run_id, profile))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return run

    async def wait_idle(self) -> None:
        """Wait for every background scan started by this orchestrator."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def run_scan(self, run_id: str, profile: TargetProfile) -> Optional[ScanRun]:
        """
        Execute every phase for one run and leave it in a terminal state.

        Source failures stay inside each module's error list. Any other
        exception fails the run with its message; a cancellation request is
        honoured at the next phase boundary.
        """
        run = self.scan_store.get_run(run_id)
        if run is None:
            raise NotFoundError(f"Scan not found: {run_id}", {"run_id": run_id})
        if run.state == ScanState.PENDING:
            self.scan_store.mark_running(run_id, PROGRESS_STARTED)

        try:
            module_results = await self._scan_sources(profile)
            self._checkpoint(run_id, PROGRESS_SOURCES_DONE)

            aggregated = aggregate(module_results, cap=self.settings.scan.result_cap)
            self._checkpoint(run_id, PROGRESS_AGGREGATED)

            bundle = await self.enrichment.enrich(
                aggregated.results,
                profile,
                total_mentions=aggregated.total_mentions,
            )
            bundle.results = rank_results(bundle.results)
            self._checkpoint(run_id, PROGRESS_ENRICHED)

            lsi = calculate_lsi(bundle)
            self._checkpoint(run_id, PROGRESS_SCORED)

            payload = build_payload(bundle, lsi, module_results, deduplicated_count=aggregated.deduplicated_count)
            self._record_lsi(run.target_id, lsi)
            self.scan_store.complete(run_id, payload)
            logger.info(
                f"Scan {run_id} completed: {payload.total_mentions} mentions, "
                f"{len(payload.mentions)} kept, LSI {lsi.total}"
            )
        except ScanCanceled:
            logger.info(f"Scan {run_id} canceled")
            self.scan_store.fail(run_id, CANCELED_MESSAGE)
        except asyncio.CancelledError:
            self.scan_store.fail(run_id, CANCELED_MESSAGE)
            raise
        except Exception as e:
            fault = OrchestrationFault(str(e) or type(e).__name__, run_id=run_id)
            logger.exception(f"Scan {run_id} failed: {fault.message}")
            self.scan_store.fail(run_id, fault.message)

        return self.scan_store.get_run(run_id)

    async def _scan_sources(self, profile: TargetProfile) -> List[ModuleResult]:
        if self._modules is not None:
            return await self._gather_modules(self._modules, profile)

        headers = {"User-Agent": self.settings.scan.user_agent}
        async with httpx.AsyncClient(timeout=httpx.Timeout(30.0), follow_redirects=True, headers=headers) as client:
            modules = build_source_modules(self.settings, client=client)
            return await self._gather_modules(modules, profile)

    async def _gather_modules(self, modules: Sequence[SourceModule], profile: TargetProfile) -> List[ModuleResult]:
        """Settle every module; a rejected module becomes an empty result with one error."""
        outcomes = await asyncio.gather(
            *(module.scan(profile) for module in modules),
            return_exceptions=True,
        )
        results: List[ModuleResult] = []
        for module, outcome in zip(modules, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.error(f"Module {module.name} failed: {outcome}")
                results.append(ModuleResult(module=module.name, errors=[f"{module.name}: {outcome}"]))
            else:
                results.append(outcome)
        return results

    def _checkpoint(self, run_id: str, progress: int) -> None:
        if self.scan_store.is_cancel_requested(run_id):
            raise ScanCanceled(run_id)
        self.scan_store.update_progress(run_id, progress)

    def _record_lsi(self, target_id: str, lsi: LSIResult) -> None:
        self.scan_store.append_lsi_history(target_id, lsi)
        if self.profile_store.set_baseline_lsi_if_unset(target_id, lsi.total):
            logger.info(f"Baseline LSI for {target_id} set to {lsi.total}")

    def get_scan(self, run_id: str, full: bool = False) -> Dict[str, Any]:
        run = self.scan_store.get_run(run_id)
        if run is None:
            raise NotFoundError(f"Scan not found: {run_id}", {"run_id": run_id})
        payload = self.scan_store.get_payload(run_id)
        return scan_view(run, payload, full=full, preview=self.settings.scan.mentions_preview)

    def get_latest_scan(self, target_id: str, full: bool = False) -> Dict[str, Any]:
        run = self.scan_store.latest_run_for_target(target_id)
        if run is None:
            raise NotFoundError(f"No scan for target: {target_id}", {"target_id": target_id})
        return self.get_scan(run.run_id, full=full)

    def cancel_scan(self, run_id: str) -> ScanRun:
        """Request cancellation; terminal runs are returned unchanged."""
        run = self.scan_store.request_cancel(run_id)
        if run is None:
            raise NotFoundError(f"Scan not found: {run_id}", {"run_id": run_id})
        return run


_DEFAULT_ORCHESTRATOR: Optional[ScanOrchestrator] = None


def get_default_orchestrator() -> ScanOrchestrator:
    global _DEFAULT_ORCHESTRATOR
    if _DEFAULT_ORCHESTRATOR is None:
        _DEFAULT_ORCHESTRATOR = ScanOrchestrator()
    return _DEFAULT_ORCHESTRATOR
