import pytest
import sys
import os
import httpx
from fastapi import Depends
from fastapi.testclient import TestClient

# Ensure we can import from the parent directory
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import client as client_module
import main
from api import ApiClient
from client import get_api_client, get_token
from main import app

BASE_URL = "http://backend.test/api"


class FakeBackend:
    """Stands in for the QuickHelp REST API. Answers from a route table and records every request."""

    def __init__(self):
        self.routes = {}
        self.requests = []
        self.offline = False

    def on(self, method, path, json=None, status=200):
        self.routes[(method, path)] = (status, json)

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == "/api" + path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("Connection refused", request=request)

        key = (request.method, request.url.path[len("/api"):])
        if key not in self.routes:
            return httpx.Response(404, json={"message": "Route not found"})
        status, body = self.routes[key]
        if status == 204:
            return httpx.Response(204)
        return httpx.Response(status, json=body if body is not None else {})

    def api(self, token=None) -> ApiClient:
        return ApiClient(BASE_URL, token=token, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture(autouse=True)
def reset_state(monkeypatch):
    client_module.query_clients.clear()
    client_module.mock_stores.clear()
    main.resend_cooldown.reset()

    # Simulated latencies off
    for name in ("CHAT_REPLY_MIN_DELAY", "CHAT_REPLY_MAX_DELAY", "BOOKING_CONFIRM_DELAY", "VERIFICATION_DELAY"):
        monkeypatch.setattr(client_module, name, 0)
    yield


@pytest.fixture
def client(backend):
    async def override_api_client(token=Depends(get_token)):
        api = backend.api(token)
        try:
            yield api
        finally:
            await api.aclose()

    app.dependency_overrides[get_api_client] = override_api_client
    yield TestClient(app)
    app.dependency_overrides.clear()
