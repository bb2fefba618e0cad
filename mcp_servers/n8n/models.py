# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
n8n data models.

Read-only projections of n8n API records. Field names follow the n8n wire
format so dumped models can be returned to MCP callers unchanged. Node,
connection, settings and static data payloads are passed through opaque.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .status import ExecutionStatus, determine_execution_status, extract_error_message


class WorkflowTag(BaseModel):
    """Workflow tag."""
    id: str
    name: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "WorkflowTag":
        return cls(id=str(data.get("id", "")), name=data.get("name") or "")


class WorkflowSummary(BaseModel):
    """
    Workflow as listed by ``GET /workflows``.

    Attributes:
        id: Workflow identifier
        name: Workflow name
        active: Whether the workflow is active
        createdAt: Creation timestamp (ISO-8601, optional)
        updatedAt: Last update timestamp (ISO-8601, optional)
        tags: Tags in upstream order
    """
    id: str
    name: str
    active: bool
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    tags: List[WorkflowTag] = Field(default_factory=list)

    @classmethod
    def _summary_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": str(data.get("id", "")),
            "name": data.get("name") or "",
            "active": bool(data.get("active", False)),
            "createdAt": data.get("createdAt"),
            "updatedAt": data.get("updatedAt"),
            "tags": [WorkflowTag.from_api(tag) for tag in data.get("tags") or []],
        }

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "WorkflowSummary":
        return cls(**cls._summary_fields(data))


class WorkflowDetail(WorkflowSummary):
    """Full workflow definition as returned by ``GET /workflows/{id}``."""
    nodes: List[Any] = Field(default_factory=list)
    connections: Dict[str, Any] = Field(default_factory=dict)
    settings: Optional[Dict[str, Any]] = None
    staticData: Optional[Dict[str, Any]] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "WorkflowDetail":
        return cls(
            **cls._summary_fields(data),
            nodes=data.get("nodes") or [],
            connections=data.get("connections") or {},
            settings=data.get("settings"),
            staticData=data.get("staticData"),
        )


class Execution(BaseModel):
    """
    Workflow execution with a normalized status.

    ``status`` is derived from the raw record, never taken from n8n's own
    status field, and ``error`` is the nested result error message.
    """
    id: str
    workflowId: str
    finished: bool
    mode: str
    startedAt: Optional[str] = None
    stoppedAt: Optional[str] = None
    waitTill: Optional[str] = None
    status: ExecutionStatus
    error: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Execution":
        return cls(
            id=str(data.get("id", "")),
            workflowId=str(data.get("workflowId", "")),
            finished=bool(data.get("finished", False)),
            mode=data.get("mode") or "",
            startedAt=data.get("startedAt"),
            stoppedAt=data.get("stoppedAt"),
            waitTill=data.get("waitTill"),
            status=determine_execution_status(data),
            error=extract_error_message(data),
        )
