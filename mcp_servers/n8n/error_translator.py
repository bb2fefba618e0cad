# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Upstream error translation.

Maps failed n8n API calls onto the closed ErrorKind taxonomy:

    401/403          -> N8nAuthError      (with API key hint)
    404              -> N8nNotFoundError
    other HTTP error -> N8nAPIError
    no response      -> N8nAPIError       (connect error, timeout, ...)
"""
import json
import logging

import httpx

from .exceptions import N8nAPIError, N8nAuthError, N8nMCPError, N8nNotFoundError

logger = logging.getLogger("n8n.errors")

AUTH_HINT = "Please check your N8N_API_KEY."


def describe_response(response: httpx.Response, fallback: str) -> str:
    """
    Render an error response body for inclusion in a message.

    JSON bodies are re-serialized compactly, other bodies are returned as
    text, and an empty body falls back to ``fallback``.
    """
    if not response.content:
        return fallback
    try:
        return json.dumps(response.json())
    except ValueError:
        return response.text


def translate_http_error(error: BaseException, context: str) -> N8nMCPError:
    """
    Translate an exception raised during an n8n API call.

    Args:
        error: Exception raised by httpx (or anything else)
        context: Human-readable description of the failed operation

    Returns:
        The N8nMCPError to raise in its place
    """
    if isinstance(error, N8nMCPError):
        return error

    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        message = describe_response(error.response, str(error))
        logger.error(f"{context}: HTTP {status} - {message}")

        if status in (401, 403):
            return N8nAuthError(f"Authentication failed: {message}. {AUTH_HINT}", status_code=status)
        if status == 404:
            return N8nNotFoundError(f"Resource not found: {message}", status_code=status)
        return N8nAPIError(f"{context}: {message}", status_code=status)

    if isinstance(error, httpx.TimeoutException):
        logger.error(f"{context}: request timed out: {error}")
        return N8nAPIError(f"{context}: request timed out ({str(error) or type(error).__name__})")

    if isinstance(error, httpx.RequestError):
        logger.error(f"{context}: request failed: {error}")
        return N8nAPIError(f"{context}: {str(error) or type(error).__name__}")

    logger.error(f"{context}: unexpected error: {error}")
    return N8nAPIError(f"{context}: {error}")
