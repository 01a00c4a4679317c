"""Shared runtime singletons for the web and CLI entrypoints."""

from __future__ import annotations

from orchestrator import ScanOrchestrator, get_default_orchestrator


def get_orchestrator() -> ScanOrchestrator:
    return get_default_orchestrator()
