"""Tests for the scan HTTP API."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from config import Settings
from core import ModuleResult, SourceResult, TargetProfile
from intelligence import EnrichmentPipeline
from orchestrator import ScanOrchestrator
from sources import SourceModule
from webapp.app import app
from webapp.runtime import get_orchestrator


class _StaticModule(SourceModule):
    def __init__(self, name: str, count: int):
        super().__init__(name, [])
        self.count = count

    async def scan(self, profile: TargetProfile) -> ModuleResult:
        return ModuleResult(
            module=self.name,
            results=[
                SourceResult(source="Reuters", category="news", url=f"https://r.example/{i}", title=f"{profile.name} {i}")
                for i in range(self.count)
            ],
            sources_scanned=1,
        )


@pytest.fixture
def orchestrator():
    svc = ScanOrchestrator(
        modules=[_StaticModule("news", 25)],
        enrichment=EnrichmentPipeline(llm=None),
        settings=Settings(),
    )
    app.dependency_overrides[get_orchestrator] = lambda: svc
    yield svc
    app.dependency_overrides.clear()


@pytest.fixture
def client(orchestrator):
    return TestClient(app)


def test_health(client) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["ok"] is True


def test_start_scan_then_poll(client, orchestrator) -> None:
    target_id = orchestrator.profile_store.add_target("user_1", TargetProfile(name="Ada Lovelace"))

    response = client.post("/api/scans", json={"target_id": target_id}, headers={"X-User-Id": "user_1"})
    assert response.status_code == 202
    body = response.json()
    assert body["status"] == "running"
    run_id = body["run_id"]

    status = client.get(f"/api/scans/{run_id}").json()
    assert status["state"] == "completed"
    assert status["progress"] == 100
    assert status["payload"]["total_mentions"] == 25
    assert len(status["payload"]["mentions"]) == 20

    full = client.get(f"/api/scans/{run_id}", params={"full": "true"}).json()
    assert len(full["payload"]["mentions"]) == 25

    latest = client.get(f"/api/targets/{target_id}/scan").json()
    assert latest["run_id"] == run_id


def test_register_target_and_scan(client) -> None:
    created = client.post("/api/targets", json={"name": "Ada Lovelace", "company": "Analytical Engines"}, headers={"X-User-Id": "u"})
    assert created.status_code == 201
    target_id = created.json()["target_id"]

    response = client.post("/api/scans", json={"target_id": target_id}, headers={"X-User-Id": "u"})
    assert response.status_code == 202


def test_start_scan_errors(client, orchestrator) -> None:
    target_id = orchestrator.profile_store.add_target("owner", TargetProfile(name="Ada Lovelace"))

    assert client.post("/api/scans", json={"target_id": "tgt_missing"}, headers={"X-User-Id": "owner"}).status_code == 404
    assert client.post("/api/scans", json={"target_id": target_id}, headers={"X-User-Id": "intruder"}).status_code == 403
    assert client.post("/api/scans", json={"target_id": target_id}).status_code == 401
    assert client.post("/api/scans", json={"target_id": " "}, headers={"X-User-Id": "owner"}).status_code == 422


def test_unknown_run_and_target_are_404(client) -> None:
    assert client.get("/api/scans/scan_missing").status_code == 404
    assert client.get("/api/targets/tgt_missing/scan").status_code == 404
    assert client.post("/api/scans/scan_missing/cancel").status_code == 404


def test_cancel_finished_run_is_a_no_op(client, orchestrator) -> None:
    target_id = orchestrator.profile_store.add_target("user_1", TargetProfile(name="Ada Lovelace"))
    run_id = client.post("/api/scans", json={"target_id": target_id}, headers={"X-User-Id": "user_1"}).json()["run_id"]

    response = client.post(f"/api/scans/{run_id}/cancel")
    assert response.status_code == 200
    body = response.json()
    assert body["cancellation_requested"] is False
    assert body["status"] == "completed"
    assert body["progress"] == 100
