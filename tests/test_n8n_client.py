# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Unit tests for the n8n API client"""

import httpx
import pytest

from mcp_servers.n8n.exceptions import N8nAPIError, N8nAuthError, N8nNotFoundError
from mcp_servers.n8n.n8n_client import unwrap


def test_unwrap():
    assert unwrap({"data": [1, 2], "nextCursor": None}) == [1, 2]
    assert unwrap({"id": "wf-1"}) == {"id": "wf-1"}
    assert unwrap([1]) == [1]
    assert unwrap(None) is None


def test_client_configuration(n8n_client):
    """Test: base URL and static headers come from the config"""
    assert str(n8n_client.http.base_url) == "http://n8n.test/api/v1/"
    assert n8n_client.http.headers["X-N8N-API-KEY"] == "test-api-key"
    assert n8n_client.http.headers["Content-Type"] == "application/json"
    assert n8n_client.http.timeout.read == 30.0


@pytest.mark.asyncio
async def test_requests_carry_api_key(n8n_client, fake_n8n):
    fake_n8n.add("GET", "/workflows", json_body={"data": []})

    await n8n_client.list_workflows()

    request = fake_n8n.requests[0]
    assert request.url.host == "n8n.test"
    assert request.url.path == "/api/v1/workflows"
    assert request.headers["X-N8N-API-KEY"] == "test-api-key"


@pytest.mark.asyncio
async def test_get_workflow_unwraps_envelope(n8n_client, fake_n8n, sample_workflow):
    """Test: enveloped and bare workflow responses look the same"""
    fake_n8n.add("GET", "/workflows/wf-1", json_body={"data": sample_workflow})
    assert await n8n_client.get_workflow("wf-1") == sample_workflow

    fake_n8n.add("GET", "/workflows/wf-1", json_body=sample_workflow)
    assert await n8n_client.get_workflow("wf-1") == sample_workflow


@pytest.mark.asyncio
async def test_list_executions_query(n8n_client, fake_n8n):
    fake_n8n.add("GET", "/executions", json_body={"data": []})

    await n8n_client.list_executions("wf-1", 25)

    params = fake_n8n.requests[0].url.params
    assert params["workflowId"] == "wf-1"
    assert params["limit"] == "25"


@pytest.mark.asyncio
async def test_activate_sends_empty_object_without_data(n8n_client, fake_n8n):
    fake_n8n.add("POST", "/workflows/wf-1/activate", json_body={"id": "wf-1", "active": True})

    await n8n_client.activate_workflow("wf-1")

    assert fake_n8n.body_of(0) == {}


@pytest.mark.asyncio
async def test_test_workflow_body(n8n_client, fake_n8n, sample_workflow):
    fake_n8n.add("POST", "/workflows/wf-1/test", json_body={"data": {"executionId": "900"}})

    result = await n8n_client.test_workflow("wf-1", sample_workflow, {"name": "Ada"})

    assert result == {"executionId": "900"}
    assert fake_n8n.body_of(0) == {"workflowData": sample_workflow, "runData": {"name": "Ada"}}


@pytest.mark.asyncio
async def test_workflow_id_is_path_encoded(n8n_client, fake_n8n):
    """Test: workflow IDs cannot escape their path segment"""
    with pytest.raises(N8nNotFoundError):
        await n8n_client.get_workflow("../credentials")

    assert fake_n8n.requests[0].url.raw_path == b"/api/v1/workflows/..%2Fcredentials"


@pytest.mark.asyncio
async def test_http_errors_are_translated(n8n_client, fake_n8n):
    fake_n8n.add("GET", "/workflows", status=401, json_body={"message": "unauthorized"})

    with pytest.raises(N8nAuthError, match="N8N_API_KEY"):
        await n8n_client.list_workflows()


@pytest.mark.asyncio
async def test_timeouts_are_translated(n8n_client, fake_n8n):
    fake_n8n.add("GET", "/executions", error=httpx.ReadTimeout)

    with pytest.raises(N8nAPIError, match="Failed to get executions for workflow wf-1"):
        await n8n_client.list_executions("wf-1", 10)


@pytest.mark.asyncio
async def test_invalid_json_is_upstream_error(n8n_client, fake_n8n):
    fake_n8n.add("GET", "/workflows", text="<html>login</html>")

    with pytest.raises(N8nAPIError, match="Failed to list workflows"):
        await n8n_client.list_workflows()
