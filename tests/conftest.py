import os
import sys
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tools.llm import LLMClient
from tools.pipedrive import PipedriveClient


def search_payload(*entries):
    """Pipedrive search response body from (result_score, item) pairs."""
    return {
        "success": True,
        "data": {"items": [{"result_score": score, "item": item} for score, item in entries]}
    }


def data_payload(data):
    return {"success": True, "data": data}


def completion(content):
    """Minimal chat completion response object."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakePipedrive:
    """In-memory Pipedrive API served through an httpx mock transport."""

    def __init__(self):
        self.routes = {}
        self.failing = set()
        self.requests = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.split("/api/v1/", 1)[-1]
        if path in self.failing:
            return httpx.Response(500, json={"success": False, "error": "Internal server error"})
        if path in self.routes:
            return httpx.Response(200, json=self.routes[path])
        return httpx.Response(404, json={"success": False, "error": "Not found"})

    def client(self, api_key="test-token", domain="acme", log=None):
        return PipedriveClient(api_key, domain, transport=self.transport, log=log)

    def paths(self):
        return [request.url.path.split("/api/v1/", 1)[-1] for request in self.requests]

    def patch_clients(self):
        """Route every client the workflow nodes create through this fake."""
        return patch(
            "graph.nodes.clients.PipedriveClient",
            side_effect=lambda api_key, domain, log=None: self.client(api_key, domain, log=log)
        )


@pytest.fixture
def pipedrive():
    return FakePipedrive()


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=completion("  Acme Corp Renewal is in negotiation.  "))
    return client


@pytest.fixture
def patch_llm(openai_client):
    with patch(
        "graph.nodes.clients.LLMClient",
        side_effect=lambda api_key, model, log=None: LLMClient(api_key, model, client=openai_client, log=log)
    ):
        yield openai_client
