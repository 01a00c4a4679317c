"""Scan API: start scans, poll status and payloads, cancel."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any, Dict, List, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, field_validator

from core import TargetProfile
from orchestrator import ScanOrchestrator
from utils.exceptions import AuthorizationError, NotFoundError
from webapp.runtime import get_orchestrator


logger = logging.getLogger(__name__)


app = FastAPI(title="Reputation Scan API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class StartScanPayload(BaseModel):
    target_id: str

    @field_validator("target_id")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("value is required")
        return text


class TargetPayload(BaseModel):
    name: str
    company: Optional[str] = None
    role: Optional[str] = None
    industry: Optional[str] = None
    linkedin_url: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("value is required")
        return text


def _require_user(user_id: Optional[str]) -> str:
    text = str(user_id or "").strip()
    if not text:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    return text


@app.get("/api/health")
def health() -> Dict[str, Any]:
    return {"ok": True, "ts": datetime.now(timezone.utc).isoformat(timespec="seconds")}


@app.post("/api/targets", status_code=201)
def create_target(
    payload: TargetPayload,
    x_user_id: Optional[str] = Header(default=None),
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    user_id = _require_user(x_user_id)
    profile = TargetProfile(**payload.model_dump())
    target_id = orchestrator.profile_store.add_target(user_id, profile)
    return {"target_id": target_id, "profile": profile.model_dump(mode="json")}


@app.post("/api/scans", status_code=202)
def start_scan(
    payload: StartScanPayload,
    background_tasks: BackgroundTasks,
    x_user_id: Optional[str] = Header(default=None),
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    user_id = _require_user(x_user_id)
    try:
        run, profile = orchestrator.prepare_scan(payload.target_id, user_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except AuthorizationError as exc:
        raise HTTPException(status_code=403, detail=exc.message) from exc

    background_tasks.add_task(orchestrator.run_scan, run.run_id, profile)
    return {"run_id": run.run_id, "status": run.state.value}


@app.get("/api/scans/{run_id}")
def get_scan(
    run_id: str,
    full: bool = False,
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    try:
        return orchestrator.get_scan(run_id, full=full)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc


@app.get("/api/targets/{target_id}/scan")
def get_latest_scan(
    target_id: str,
    full: bool = False,
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    try:
        return orchestrator.get_latest_scan(target_id, full=full)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc


@app.post("/api/scans/{run_id}/cancel")
def cancel_scan(
    run_id: str,
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    try:
        run = orchestrator.cancel_scan(run_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    return {
        "run_id": run_id,
        "cancellation_requested": run.cancellation_requested,
        "status": run.state.value,
        "progress": run.progress,
    }
