# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Operation dispatcher.

Validates tool arguments against each tool's input schema, routes the call
to its handler and turns every result or failure into a ToolOutcome. No
exception escapes ``dispatch``.
"""
import inspect
import json
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel

from .exceptions import ErrorKind, N8nMCPError, N8nUnsupportedOperationError, N8nValidationError
from .logging_setup import log_event

logger = logging.getLogger("n8n.dispatcher")

Handler = Callable[..., Awaitable[Dict[str, Any]]]


class ToolDefinition(BaseModel):
    """MCP Tool Definition"""
    name: str
    description: str
    input_schema: Dict[str, Any]


class ToolError(BaseModel):
    """Classified tool failure."""
    kind: ErrorKind
    message: str

    @property
    def code(self) -> int:
        return self.kind.jsonrpc_code


class ToolOutcome(BaseModel):
    """
    Explicit result of one tool invocation.

    Exactly one of three shapes:
        success          payload set, error None, is_error False
        classified error error set (kind + message)
        generic failure  payload ``{"success": False, "error": ...}``, is_error True
    """
    payload: Optional[Dict[str, Any]] = None
    error: Optional[ToolError] = None
    is_error: bool = False

    @classmethod
    def success(cls, payload: Dict[str, Any]) -> "ToolOutcome":
        return cls(payload=payload)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ToolOutcome":
        return cls(error=ToolError(kind=kind, message=message))

    @classmethod
    def generic_failure(cls, message: str) -> "ToolOutcome":
        return cls(payload={"success": False, "error": message}, is_error=True)

    @property
    def text(self) -> str:
        """Payload rendered as MCP text content."""
        return json.dumps(self.payload, indent=2)


def _coerce_integer(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise N8nValidationError(f"{name} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise N8nValidationError(f"{name} must be an integer")


def validate_arguments(schema: Dict[str, Any], arguments: Any) -> Dict[str, Any]:
    """
    Validate and coerce tool arguments.

    Only properties declared in ``schema`` are returned; unknown arguments
    are dropped. Optional arguments passed as null are treated as absent.

    Raises:
        N8nValidationError: Missing required argument or wrong type
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise N8nValidationError("arguments must be an object")

    properties = schema.get("properties", {})
    required = schema.get("required", [])

    for name in required:
        value = arguments.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise N8nValidationError(f"{name} is required")

    validated: Dict[str, Any] = {}
    for name, prop in properties.items():
        value = arguments.get(name)
        if value is None:
            continue

        prop_type = prop.get("type")
        if prop_type == "string":
            if not isinstance(value, str):
                raise N8nValidationError(f"{name} must be a string")
        elif prop_type == "integer":
            value = _coerce_integer(name, value)
        elif prop_type == "object":
            if not isinstance(value, dict):
                raise N8nValidationError(f"{name} must be an object")
        validated[name] = value

    return validated


class OperationDispatcher:
    """Registry of tools and single entry point for invoking them."""

    def __init__(self) -> None:
        self.handlers: Dict[str, Handler] = {}
        self.definitions: Dict[str, ToolDefinition] = {}

    def register(
        self,
        name: str,
        handler: Handler,
        description: str,
        input_schema: Dict[str, Any]
    ) -> None:
        """Register a tool handler with its input schema."""
        if not inspect.iscoroutinefunction(handler):
            raise TypeError(f"Handler for tool '{name}' must be a coroutine function")
        self.handlers[name] = handler
        self.definitions[name] = ToolDefinition(
            name=name,
            description=description,
            input_schema=input_schema
        )
        logger.debug(f"Registered tool: {name}")

    @property
    def tool_definitions(self) -> List[ToolDefinition]:
        return list(self.definitions.values())

    async def dispatch(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolOutcome:
        """
        Invoke a tool.

        Args:
            name: Tool name
            arguments: Raw tool arguments from the caller

        Returns:
            ToolOutcome describing success, a classified error, or a
            generic failure
        """
        started = time.monotonic()
        upstream_status: Optional[int] = None
        try:
            if name not in self.handlers:
                raise N8nUnsupportedOperationError(f"Unknown tool: {name}")
            kwargs = validate_arguments(self.definitions[name].input_schema, arguments)
            payload = await self.handlers[name](**kwargs)
            outcome = ToolOutcome.success(payload)
        except N8nMCPError as e:
            outcome = ToolOutcome.failure(e.kind, e.message)
            upstream_status = e.status_code
        except Exception as e:
            logger.exception(f"Tool '{name}' failed unexpectedly")
            outcome = ToolOutcome.generic_failure(str(e))

        if outcome.is_error or (outcome.error and not outcome.error.kind.is_caller_error):
            level = "ERROR"
        elif outcome.error:
            level = "WARNING"
        else:
            level = "INFO"
        log_event(
            logger,
            "tool_call",
            level=level,
            tool=name,
            duration_ms=round((time.monotonic() - started) * 1000, 1),
            error_kind=outcome.error.kind.value if outcome.error else None,
            is_error=outcome.is_error,
            upstream_status=upstream_status,
        )
        return outcome
