# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Test Fixtures and Utilities for the n8n MCP server

Provides a fake n8n API (served through httpx.MockTransport) and fixtures
for the client, handlers and MCP server built on top of it.
"""

import json
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

# Add repository root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from mcp_servers.n8n.config import N8nConfig
from mcp_servers.n8n.handlers import N8nToolHandlers
from mcp_servers.n8n.n8n_client import N8nClient
from mcp_servers.n8n.n8n_server import N8nMCPServer

N8N_URL = "http://n8n.test"
API_KEY = "test-api-key"
API_PREFIX = "/api/v1"


# ============================================================================
# Fake n8n API
# ============================================================================

class FakeN8n:
    """
    In-memory stand-in for the n8n REST API.

    Routes are keyed by (method, path relative to /api/v1). Unrouted
    requests answer 404 like n8n does. Every request is recorded.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, json_body: Any = None,
            text: Optional[str] = None, error: Optional[type] = None) -> None:
        self.routes[(method, path)] = (status, json_body, text, error)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len(API_PREFIX):]
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})

        status, json_body, text, error = route
        if error is not None:
            raise error("simulated transport failure", request=request)
        if text is not None:
            return httpx.Response(status, text=text)
        if json_body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=json_body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def calls(self) -> List[Tuple[str, str]]:
        return [(r.method, r.url.path[len(API_PREFIX):]) for r in self.requests]

    def body_of(self, index: int) -> Any:
        return json.loads(self.requests[index].content)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def n8n_config():
    """Immutable test configuration"""
    return N8nConfig(base_url=N8N_URL, api_key=API_KEY)


@pytest.fixture
def fake_n8n():
    """Fake n8n API with no routes"""
    return FakeN8n()


@pytest.fixture
def n8n_client(n8n_config, fake_n8n):
    """N8nClient wired to the fake API"""
    return N8nClient(n8n_config, transport=fake_n8n.transport)


@pytest.fixture
def tool_handlers(n8n_client):
    """Tool handlers bound to the fake-backed client"""
    return N8nToolHandlers(n8n_client)


@pytest.fixture
def mcp_server(n8n_config, fake_n8n):
    """Full n8n MCP server backed by the fake API"""
    return N8nMCPServer(n8n_config, transport=fake_n8n.transport)


@pytest.fixture
def api_client(mcp_server):
    """HTTP client for the MCP server's FastAPI app"""
    return TestClient(mcp_server.app)


# ============================================================================
# Sample n8n records
# ============================================================================

@pytest.fixture
def sample_workflow():
    """Workflow detail record as n8n returns it"""
    return {
        "id": "wf-1",
        "name": "Daily report",
        "active": False,
        "createdAt": "2025-10-01T08:00:00.000Z",
        "updatedAt": "2025-10-02T09:30:00.000Z",
        "tags": [{"id": "t1", "name": "reports"}],
        "nodes": [
            {"id": "n1", "name": "Manual Trigger", "type": "n8n-nodes-base.manualTrigger",
             "position": [0, 0], "parameters": {}},
            {"id": "n2", "name": "HTTP Request", "type": "n8n-nodes-base.httpRequest",
             "position": [200, 0], "parameters": {"url": "https://example.com"}},
        ],
        "connections": {
            "Manual Trigger": {"main": [[{"node": "HTTP Request", "type": "main", "index": 0}]]}
        },
        "settings": {"executionOrder": "v1"},
        "staticData": None,
    }


@pytest.fixture
def sample_executions():
    """Execution list covering every derived status"""
    return [
        {"id": "101", "workflowId": "wf-1", "finished": True, "mode": "manual",
         "startedAt": "2025-10-05T10:00:00.000Z", "stoppedAt": "2025-10-05T10:00:02.000Z"},
        {"id": "102", "workflowId": "wf-1", "finished": True, "mode": "trigger",
         "startedAt": "2025-10-05T11:00:00.000Z", "stoppedAt": "2025-10-05T11:00:01.000Z",
         "data": {"resultData": {"error": {"message": "Request failed with status code 500"}}}},
        {"id": "103", "workflowId": "wf-1", "finished": False, "mode": "webhook",
         "startedAt": "2025-10-05T12:00:00.000Z"},
        {"id": "104", "workflowId": "wf-1", "finished": False, "mode": "manual",
         "startedAt": "2025-10-05T13:00:00.000Z", "waitTill": "2025-10-06T13:00:00.000Z"},
    ]
