# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
n8n MCP Custom Exceptions

Provides structured error handling for n8n MCP operations.
Every error carries one ErrorKind from a closed set; the kind decides how
the MCP boundary reports it.
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Closed error taxonomy for tool invocations."""
    INVALID_ARGUMENT = "invalid_argument"
    UNSUPPORTED_OPERATION = "unsupported_operation"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"

    @property
    def jsonrpc_code(self) -> int:
        """JSON-RPC 2.0 error code reported for this kind."""
        return _JSONRPC_CODES[self]

    @property
    def is_caller_error(self) -> bool:
        """True for errors caused by the request itself, not by n8n."""
        return self in (ErrorKind.INVALID_ARGUMENT, ErrorKind.UNSUPPORTED_OPERATION)


_JSONRPC_CODES = {
    ErrorKind.INVALID_ARGUMENT: -32602,
    ErrorKind.UNSUPPORTED_OPERATION: -32601,
    ErrorKind.AUTHENTICATION: -32600,
    ErrorKind.NOT_FOUND: -32600,
    ErrorKind.UPSTREAM: -32603,
}


class N8nMCPError(Exception):
    """Base exception for all n8n MCP tool errors."""

    kind: ErrorKind = ErrorKind.UPSTREAM

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class N8nValidationError(N8nMCPError):
    """Input validation error (missing or malformed arguments)."""
    kind = ErrorKind.INVALID_ARGUMENT


class N8nUnsupportedOperationError(N8nMCPError):
    """Requested tool name is not one this server exposes."""
    kind = ErrorKind.UNSUPPORTED_OPERATION


class N8nAuthError(N8nMCPError):
    """n8n rejected the API key (HTTP 401/403)."""
    kind = ErrorKind.AUTHENTICATION


class N8nNotFoundError(N8nMCPError):
    """n8n resource does not exist (HTTP 404)."""
    kind = ErrorKind.NOT_FOUND


class N8nAPIError(N8nMCPError):
    """API communication error (network, timeout, other HTTP errors)."""
    kind = ErrorKind.UPSTREAM


class N8nConfigError(Exception):
    """Configuration error (missing credentials, invalid config)."""
    pass

