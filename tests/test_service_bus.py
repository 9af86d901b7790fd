"""
Service Bus Tests
-----------------
Tests for the local FastAPI surface.
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi.testclient import TestClient

from commands import Command
from core.errors import ActionFailure
from infra.message_bus import MessageDispatcher
from infra.service_bus import create_app


@pytest.fixture
def client(registry):
    def broken():
        raise ActionFailure("Settings page blocked")

    registry.register(Command(id="broken", title="Broken Thing", action=broken))
    app = create_app(MessageDispatcher(registry))
    with TestClient(app) as test_client:
        yield test_client


class TestServiceBus:
    """HTTP routes."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["commands_loaded"] == 4

    def test_list_commands(self, client):
        response = client.get("/commands")

        assert response.status_code == 200
        assert [c["id"] for c in response.json()] == ["a", "b", "c", "broken"]

    def test_search(self, client):
        response = client.get("/commands/search", params={"q": "cnm"})

        assert response.status_code == 200
        [result] = response.json()["results"]
        assert result["command"]["id"] == "a"
        assert result["matches"] == [0, 8, 12]

    def test_search_limit_validation(self, client):
        response = client.get("/commands/search", params={"q": "open", "limit": 0})
        assert response.status_code == 422

    def test_execute(self, client, calls):
        response = client.post("/commands/b/execute")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert calls == ["b"]

    def test_execute_missing(self, client):
        response = client.post("/commands/missing-id/execute")

        assert response.status_code == 404
        assert "missing-id" in response.json()["detail"]

    def test_execute_failure(self, client):
        response = client.post("/commands/broken/execute")

        assert response.status_code == 500
        assert response.json()["detail"] == "Settings page blocked"

    def test_raw_message(self, client):
        response = client.post("/messages", json={"type": "searchCommands", "query": "open"})

        assert response.status_code == 200
        ids = [r["command"]["id"] for r in response.json()["results"]]
        assert ids[:2] == ["c", "b"]

    def test_raw_message_invalid(self, client):
        response = client.post("/messages", json={"type": "executeCommand"})

        assert response.status_code == 200
        assert response.json()["success"] is False
