# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
n8n API Client

Async wrapper around the n8n public REST API (``/api/v1``).
Attaches the static API key, unwraps ``{"data": ...}`` envelopes and
translates every failure into an N8nMCPError.
"""
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from .config import N8nConfig
from .error_translator import translate_http_error

logger = logging.getLogger("n8n.client")


def unwrap(body: Any) -> Any:
    """Return ``body["data"]`` for enveloped responses, else ``body``."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


class N8nClient:
    """
    n8n REST API client.

    One instance is shared by all tool calls; it holds no per-call state.
    """

    def __init__(
        self,
        config: N8nConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        """
        Initialize n8n client.

        Args:
            config: Server configuration (base URL, API key, timeout)
            transport: Optional httpx transport, used by tests
        """
        self.config = config
        self.http = httpx.AsyncClient(
            base_url=config.api_url,
            headers={
                "X-N8N-API-KEY": config.api_key,
                "Content-Type": "application/json",
            },
            timeout=config.timeout,
            transport=transport,
        )
        logger.info(f"N8nClient initialized for {config.api_url}")

    async def aclose(self) -> None:
        await self.http.aclose()

    async def list_workflows(self) -> Dict[str, Any]:
        """
        List workflows.

        Returns:
            Raw response body (``{"data": [...], "nextCursor": ...}``)

        Raises:
            N8nMCPError: If the API request fails
        """
        return await self._request("GET", "/workflows", context="Failed to list workflows")

    async def get_workflow(self, workflow_id: str) -> Dict[str, Any]:
        """
        Get a workflow definition by ID.

        Args:
            workflow_id: n8n workflow identifier

        Returns:
            Workflow record (nodes, connections, settings, ...)

        Raises:
            N8nNotFoundError: If the workflow does not exist
            N8nMCPError: If the API request fails
        """
        body = await self._request(
            "GET",
            f"/workflows/{quote(workflow_id, safe='')}",
            context=f"Failed to get workflow {workflow_id}",
        )
        return unwrap(body)

    async def list_executions(self, workflow_id: str, limit: int) -> Dict[str, Any]:
        """
        List recent executions of a workflow.

        Args:
            workflow_id: n8n workflow identifier
            limit: Maximum number of executions (already clamped by the caller)

        Returns:
            Raw response body (``{"data": [...], "nextCursor": ...}``)

        Raises:
            N8nMCPError: If the API request fails
        """
        return await self._request(
            "GET",
            "/executions",
            context=f"Failed to get executions for workflow {workflow_id}",
            params={"workflowId": workflow_id, "limit": limit},
        )

    async def activate_workflow(self, workflow_id: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """
        Activate a workflow.

        Args:
            workflow_id: n8n workflow identifier
            data: Optional trigger data sent as the request body

        Raises:
            N8nMCPError: If the API request fails
        """
        return await self._request(
            "POST",
            f"/workflows/{quote(workflow_id, safe='')}/activate",
            context=f"Failed to trigger workflow {workflow_id}",
            json=data or {},
        )

    async def test_workflow(
        self,
        workflow_id: str,
        workflow_data: Dict[str, Any],
        run_data: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Start a test execution of a workflow.

        Args:
            workflow_id: n8n workflow identifier
            workflow_data: Workflow definition as fetched from n8n
            run_data: Caller-supplied input data (optional)

        Returns:
            Unwrapped response data, containing ``executionId``

        Raises:
            N8nMCPError: If the API request fails
        """
        body = await self._request(
            "POST",
            f"/workflows/{quote(workflow_id, safe='')}/test",
            context=f"Failed to trigger workflow {workflow_id}",
            json={"workflowData": workflow_data, "runData": run_data},
        )
        return unwrap(body) or {}

    async def _request(self, method: str, path: str, context: str, **kwargs: Any) -> Any:
        """
        Perform one API round trip.

        Args:
            method: HTTP method
            path: Path relative to ``/api/v1``
            context: Description of the operation, used in error messages
            **kwargs: Passed to ``httpx.AsyncClient.request``

        Returns:
            Decoded JSON body, or None for an empty body

        Raises:
            N8nMCPError: Translated HTTP or transport failure
        """
        logger.debug(f"{method} {path}")
        try:
            response = await self.http.request(method, path, **kwargs)
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()
        except Exception as e:
            raise translate_http_error(e, context) from e
