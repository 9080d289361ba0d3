"""Tests for the HTTP session endpoint."""
import asyncio
import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from vmpc.mpc_core import MPCConfig, Orchestrator
from vmpc.server import app, get_base_config

SUM_SESSION = json.loads((Path(__file__).parent.parent / "examples" / "sum.json").read_text())


@pytest.fixture
def client():
    app.dependency_overrides[get_base_config] = lambda: MPCConfig(parties=2, seed="0x0a")
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    body = client.get("/health").json()
    assert body == {"ok": True, "modulus": 2**61 - 1, "parties": 2}


@pytest.mark.parametrize("mode", ["sync", "async"])
def test_run_sum(client, mode):
    resp = client.post("/session/run", params={"mode": mode}, json=SUM_SESSION)
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["parties"] == 3
    assert body["outputs"] == {str(p): {"sum": 35} for p in range(3)}


def test_parties_default_to_server_config(client):
    session = {
        "instructions": [
            {"op": "input", "id": "x", "party": 0, "value": 7},
            {"op": "share", "id": "x", "party": 0},
            {"op": "scalar_mul", "dest": "y", "a": "x", "scalar": 6},
            {"op": "open", "dest": "z", "id": "y"},
            {"op": "output", "id": "z"},
        ],
    }
    body = client.post("/session/run", json=session).json()
    assert body["parties"] == 2
    assert body["outputs"] == {"0": {"z": 42}, "1": {"z": 42}}


def test_abort_is_422(client):
    session = {
        "parties": 3,
        "inputs": [{"party": 1, "id": "b", "value": 2}],
        "instructions": [
            {"op": "input", "id": "b", "party": 1},
            {"op": "open", "dest": "out", "id": "b"},
        ],
    }
    resp = client.post("/session/run", json=session)
    assert resp.status_code == 422
    assert resp.json()["detail"]["error"] == "ProtocolAbort"


def test_bad_mode(client):
    assert client.post("/session/run", params={"mode": "threads"}, json=SUM_SESSION).status_code == 400


def test_party_out_of_range(client):
    resp = client.post("/session/run", json=dict(SUM_SESSION, parties=2))
    assert resp.status_code == 400


def test_unknown_op_rejected(client):
    resp = client.post("/session/run", json={"instructions": [{"op": "xor", "id": 1}]})
    assert resp.status_code == 422


def test_sync_mode_runs_off_the_event_loop(client, monkeypatch):
    seen = []
    original = Orchestrator.run

    def run(self, circuit):
        try:
            asyncio.get_running_loop()
            seen.append("event loop")
        except RuntimeError:
            seen.append("worker thread")
        return original(self, circuit)

    monkeypatch.setattr(Orchestrator, "run", run)
    resp = client.post("/session/run", params={"mode": "sync"}, json=SUM_SESSION)
    assert resp.status_code == 200
    assert seen == ["worker thread"]
