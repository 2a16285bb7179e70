"""Offline tests for the treasury HTTP surface."""
from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from treasury_orchestrator.api import create_app
from treasury_orchestrator.audit_exporter import parse_audit_csv
from treasury_orchestrator.session import TreasurySession


@pytest.fixture()
def client(session: TreasurySession) -> TestClient:
    return TestClient(create_app(session))


# ---------------------------------------------------------------------------
# Utilities
# ---------------------------------------------------------------------------

def _metrics_text(client: TestClient) -> str:
    r = client.get("/metrics/")
    assert r.status_code == 200
    return r.text


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

def test_healthz(client: TestClient):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "session_id": "test-session"}


def test_snapshot_shape(client: TestClient):
    body = client.get("/treasury/snapshot").json()
    assert set(body) >= {
        "balances",
        "total_cash",
        "policy",
        "connection",
        "recommendation",
        "approval",
        "readiness",
        "last_sweep",
        "audit_log",
        "projection",
        "uplift",
        "flow_step",
    }
    assert body["connection"] == "NotConnected"
    assert body["readiness"] == {"executable": False, "reason": "not_connected"}
    assert len(body["projection"]) == 6


def test_put_balance_normalises_text(client: TestClient):
    resp = client.put("/treasury/balances/Operating", json={"value": "$80,000"})
    assert resp.status_code == 200, resp.text
    assert Decimal(resp.json()["value"]) == Decimal(80_000)


def test_unknown_account_is_422(client: TestClient):
    resp = client.put("/treasury/balances/Savings", json={"value": 1})
    assert resp.status_code == 422


def test_connect_rejects_not_connected(client: TestClient):
    assert client.post("/treasury/connect", json={"mode": "NotConnected"}).status_code == 400
    assert client.post("/treasury/connect", json={"mode": "Carrier"}).status_code == 422


def test_full_sweep_flow(client: TestClient):
    client.post("/treasury/demo")
    client.post("/treasury/connect", json={"mode": "WalletLink"})

    blocked = client.post("/treasury/sweep", json={"path": "Quick"}).json()
    assert blocked["executed"] is False
    assert blocked["readiness"]["reason"] == "approval_pending"

    assert client.post("/treasury/approval/approve").json()["approved"] is True
    done = client.post("/treasury/sweep", json={"path": "Quick"}).json()
    assert done["executed"] is True
    assert done["summary"]["path"] == "Quick"
    assert Decimal(done["summary"]["amount"]) == Decimal(20_000)
    assert done["readiness"]["reason"] == "approval_pending"

    snap = client.get("/treasury/snapshot").json()
    assert Decimal(snap["balances"]["Operating"]) == Decimal(60_000)
    assert Decimal(snap["balances"]["Yield"]) == Decimal(340_000)
    assert snap["flow_step"] == 4
    assert snap["audit_log"][0]["kind"] == "sweep_executed"

    m_text = _metrics_text(client)
    assert "treasury_sweeps_total" in m_text and 'path="Quick"' in m_text


def test_patch_policy_emits_one_event_per_field(client: TestClient):
    resp = client.patch(
        "/treasury/policy",
        json={"operating_target": "60000", "alternative_rate_pct": 4.5, "horizon_months": 12},
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert Decimal(body["operating_target"]) == Decimal(60_000)
    assert body["horizon_months"] == 12
    kinds = [e["kind"] for e in client.get("/treasury/audit").json()]
    assert kinds == ["policy_updated", "policy_updated"]


def test_flow_endpoints(client: TestClient):
    assert client.post("/treasury/flow/next").json() == {"step": 1, "label": "Connect"}
    client.post("/treasury/connect", json={"mode": "DemoFeed"})
    assert client.post("/treasury/flow/next").json()["label"] == "Analyze"
    assert client.put("/treasury/flow", json={"step": 3}).json()["label"] == "Allocate"
    assert client.post("/treasury/flow/back").json()["label"] == "Analyze"
    assert client.post("/treasury/flow/restart").json()["label"] == "Connect"


def test_audit_export_and_clear(client: TestClient):
    client.post("/treasury/connect", json={"mode": "DemoFeed"})
    client.put("/treasury/balances/Payment", json={"value": 500})

    resp = client.get("/treasury/audit/export")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    rows = parse_audit_csv(resp.text)
    assert [r.event for r in rows] == ["balance_updated", "connected"]

    assert client.delete("/treasury/audit").json() == {"removed": 2}
    assert client.get("/treasury/audit").json() == []


def test_projection_endpoint(client: TestClient):
    points = client.get("/treasury/projection").json()
    assert points[-1] == {
        "month": 6,
        "label": "Month 6",
        "baseline_cumulative": 250,
        "alternative_cumulative": 6250,
    }
