# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Unit tests for structured logging"""

import json
import logging

from mcp_servers.n8n.logging_setup import JSONFormatter, TextFormatter, configure_logging


def make_record(**extra):
    record = logging.LogRecord("n8n.dispatcher", logging.INFO, __file__, 1, "tool_call", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    line = JSONFormatter().format(make_record(tool="list_workflows", duration_ms=12.5))
    data = json.loads(line)

    assert data["level"] == "INFO"
    assert data["logger"] == "n8n.dispatcher"
    assert data["message"] == "tool_call"
    assert data["tool"] == "list_workflows"
    assert data["duration_ms"] == 12.5
    assert data["timestamp"].endswith("Z")


def test_configure_logging_replaces_handlers():
    logger = configure_logging("DEBUG", "text")
    logger = configure_logging("WARNING", "json")

    assert logger.name == "n8n"
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    logger = configure_logging("INFO", "text")
    assert isinstance(logger.handlers[0].formatter, TextFormatter)

    # Leave the hierarchy as tests found it
    logger.handlers = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
