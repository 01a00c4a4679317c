"""Scan orchestration: run lifecycle, background execution and stores."""

from .service import (
    CANCELED_MESSAGE,
    ScanCanceled,
    ScanOrchestrator,
    build_payload,
    get_default_orchestrator,
    scan_view,
)
from .store import InMemoryProfileStore, InMemoryScanStore

__all__ = [
    "CANCELED_MESSAGE",
    "InMemoryProfileStore",
    "InMemoryScanStore",
    "ScanCanceled",
    "ScanOrchestrator",
    "build_payload",
    "get_default_orchestrator",
    "scan_view",
]
