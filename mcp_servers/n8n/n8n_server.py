# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
n8n MCP Server

Exposes n8n workflow automation as MCP tools.
Provides 4 tools for listing, inspecting, monitoring and triggering workflows.
"""
import logging
import sys
from typing import Optional

import httpx

from .base_server import BaseMCPServer
from .config import N8nConfig, load_config
from .exceptions import N8nConfigError
from .handlers import DEFAULT_EXECUTION_LIMIT, MAX_EXECUTION_LIMIT, N8nToolHandlers
from .logging_setup import configure_logging
from .n8n_client import N8nClient

logger = logging.getLogger("n8n.server")


class N8nMCPServer(BaseMCPServer):
    """
    n8n MCP Server - REST API operations for n8n integration.

    Provides 4 tools:
    - list_workflows: List all workflows
    - get_workflow: Get a workflow definition by ID
    - get_executions: Get recent executions of a workflow
    - trigger_workflow: Manually trigger a workflow
    """

    def __init__(self, config: N8nConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        """
        Initialize n8n MCP Server.

        Args:
            config: Server configuration
            transport: Optional httpx transport for the n8n client, used by tests
        """
        super().__init__(
            name="n8n",
            port=config.port,
            host=config.host,
            description="n8n MCP Server - list, inspect, monitor and trigger n8n workflows"
        )

        self.config = config
        self.client = N8nClient(config, transport=transport)
        self.handlers = N8nToolHandlers(self.client)

        self._register_n8n_tools()
        logger.info("n8n MCP Server initialized successfully")

    async def shutdown(self) -> None:
        await self.client.aclose()

    def _register_n8n_tools(self) -> None:
        """Register all 4 n8n tools with input schemas."""
        self.register_tool(
            name="list_workflows",
            handler=self.handlers.list_workflows,
            description=(
                "Get all workflows with their IDs, names, and active status. "
                "Returns a list of all workflows in your n8n instance."
            ),
            input_schema={
                "type": "object",
                "properties": {},
                "required": []
            }
        )

        self.register_tool(
            name="get_workflow",
            handler=self.handlers.get_workflow,
            description=(
                "Fetch the complete JSON definition of a specific workflow by ID. "
                "This includes all nodes, connections, and settings."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "workflow_id": {
                        "type": "string",
                        "description": "The ID of the workflow to fetch"
                    }
                },
                "required": ["workflow_id"]
            }
        )

        self.register_tool(
            name="get_executions",
            handler=self.handlers.get_executions,
            description=(
                "Get recent execution history for a workflow. "
                "Returns execution status, timestamps, and error messages if any."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "workflow_id": {
                        "type": "string",
                        "description": "The ID of the workflow to get executions for"
                    },
                    "limit": {
                        "type": "integer",
                        "description": (
                            f"Maximum number of executions to return "
                            f"(default: {DEFAULT_EXECUTION_LIMIT}, max: {MAX_EXECUTION_LIMIT})"
                        ),
                        "default": DEFAULT_EXECUTION_LIMIT
                    }
                },
                "required": ["workflow_id"]
            }
        )

        self.register_tool(
            name="trigger_workflow",
            handler=self.handlers.trigger_workflow,
            description=(
                "Manually trigger a workflow execution. "
                "Optionally provide input data to pass to the workflow."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "workflow_id": {
                        "type": "string",
                        "description": "The ID of the workflow to trigger"
                    },
                    "data": {
                        "type": "object",
                        "description": "Optional data to pass to the workflow trigger (must be valid JSON)"
                    }
                },
                "required": ["workflow_id"]
            }
        )


def main() -> None:
    try:
        config = load_config()
    except N8nConfigError as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.log_level, config.log_format)
    server = N8nMCPServer(config)
    server.run()


if __name__ == "__main__":
    main()
