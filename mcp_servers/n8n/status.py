# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Execution status normalization.

n8n reports execution state through several overlapping fields
(waitTill, finished, stoppedAt, data.resultData.error). This module
collapses them into a single ExecutionStatus.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ExecutionStatus(str, Enum):
    """Normalized execution status."""
    SUCCESS = "success"
    ERROR = "error"
    WAITING = "waiting"
    RUNNING = "running"


def extract_result_error(execution: Dict[str, Any]) -> Optional[Any]:
    """
    Return the nested ``data.resultData.error`` value, if any.

    An empty error object still counts as an error.
    """
    data = execution.get("data")
    if not isinstance(data, dict):
        return None
    result_data = data.get("resultData")
    if not isinstance(result_data, dict):
        return None
    error = result_data.get("error")
    if isinstance(error, (dict, list)) or error:
        return error
    return None


def extract_error_message(execution: Dict[str, Any]) -> Optional[str]:
    """Return the execution's error message, or None."""
    error = extract_result_error(execution)
    if not isinstance(error, dict):
        return None
    return error.get("message") or None


def determine_execution_status(execution: Dict[str, Any]) -> ExecutionStatus:
    """
    Derive the status of a raw n8n execution record.

    Precedence, first match wins:
        waitTill set          -> waiting
        not finished          -> running
        result error present  -> error
        finished + stoppedAt  -> success
        anything else         -> error

    A finished execution with a stale waitTill still reports ``waiting``.
    """
    if execution.get("waitTill"):
        return ExecutionStatus.WAITING
    if not execution.get("finished"):
        return ExecutionStatus.RUNNING
    if extract_result_error(execution) is not None:
        return ExecutionStatus.ERROR
    if execution.get("finished") and execution.get("stoppedAt"):
        return ExecutionStatus.SUCCESS
    return ExecutionStatus.ERROR
