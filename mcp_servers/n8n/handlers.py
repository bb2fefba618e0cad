# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
n8n tool handlers.

Each handler calls the n8n client and reshapes the response into the
normalized result returned to MCP callers.
"""
import logging
from typing import Any, Dict, List, Optional

from .models import Execution, WorkflowDetail, WorkflowSummary
from .n8n_client import N8nClient, unwrap

logger = logging.getLogger("n8n.handlers")

DEFAULT_EXECUTION_LIMIT = 10
MAX_EXECUTION_LIMIT = 100


def clamp_limit(limit: Optional[int]) -> int:
    """Clamp an execution limit into [1, 100], defaulting to 10."""
    if limit is None:
        limit = DEFAULT_EXECUTION_LIMIT
    return min(max(1, limit), MAX_EXECUTION_LIMIT)


def _records(body: Any, what: str) -> List[Dict[str, Any]]:
    """Extract the record list from a list response, warning on truncation."""
    if isinstance(body, dict) and body.get("nextCursor"):
        logger.warning(f"n8n returned more {what} than one page; results are truncated")
    records = unwrap(body)
    if records is None:
        return []
    if not isinstance(records, list):
        raise TypeError(f"Unexpected {what} response from n8n: expected a list")
    return records


class N8nToolHandlers:
    """The four n8n tools, bound to one shared client."""

    def __init__(self, client: N8nClient) -> None:
        self.client = client

    async def list_workflows(self) -> Dict[str, Any]:
        """
        List all workflows.

        Returns:
            ``{"success": True, "count": n, "workflows": [...]}`` in n8n order
        """
        body = await self.client.list_workflows()
        workflows = [
            WorkflowSummary.from_api(record).model_dump(mode="json")
            for record in _records(body, "workflows")
        ]
        return {
            "success": True,
            "count": len(workflows),
            "workflows": workflows,
        }

    async def get_workflow(self, workflow_id: str) -> Dict[str, Any]:
        """
        Fetch the complete definition of a workflow.

        Args:
            workflow_id: n8n workflow identifier

        Returns:
            ``{"success": True, "workflow": {...}}``
        """
        record = await self.client.get_workflow(workflow_id)
        return {
            "success": True,
            "workflow": WorkflowDetail.from_api(record).model_dump(mode="json"),
        }

    async def get_executions(self, workflow_id: str, limit: Optional[int] = None) -> Dict[str, Any]:
        """
        Get recent executions for a workflow.

        Args:
            workflow_id: n8n workflow identifier
            limit: Maximum executions to return (default 10, clamped to 1-100)

        Returns:
            ``{"success": True, "workflowId": ..., "count": n, "executions": [...]}``
        """
        body = await self.client.list_executions(workflow_id, clamp_limit(limit))
        executions = [
            Execution.from_api(record).model_dump(mode="json")
            for record in _records(body, "executions")
        ]
        return {
            "success": True,
            "workflowId": workflow_id,
            "count": len(executions),
            "executions": executions,
        }

    async def trigger_workflow(self, workflow_id: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Manually trigger a workflow.

        Activates the workflow, reads it back, then starts a test execution
        with ``data`` as run data. The test execution is used whether or not
        the workflow is active. Activation is not undone if a later call
        fails.

        Args:
            workflow_id: n8n workflow identifier
            data: Optional input data for the workflow

        Returns:
            ``{"success": True, "message": ..., "workflowId": ...,
            "executionId": ..., "workflowActive": bool}``
        """
        await self.client.activate_workflow(workflow_id, data)

        workflow = await self.client.get_workflow(workflow_id)
        active = bool(workflow.get("active", False))

        # TODO: trigger active workflows through their webhook path once n8n's
        # intended semantics are confirmed. Until then active and inactive
        # workflows both go through the test endpoint.
        result = await self.client.test_workflow(workflow_id, workflow, data)

        logger.info(f"Triggered workflow {workflow_id} (active={active})")
        return {
            "success": True,
            "message": "Workflow triggered successfully",
            "workflowId": workflow_id,
            "executionId": result.get("executionId"),
            "workflowActive": active,
        }
