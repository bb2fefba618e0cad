# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Base MCP Server implementation
Speaks the MCP protocol (JSON-RPC 2.0 over HTTP) and delegates tool calls
to an OperationDispatcher.
"""
import asyncio
import logging
import os
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional
from urllib.parse import urlparse

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .dispatcher import Handler, OperationDispatcher, ToolOutcome

logger = logging.getLogger("n8n.server")

SUPPORTED_PROTOCOL_VERSIONS = ["2025-11-25", "2025-06-18", "2025-03-26"]
LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


@dataclass
class MCPServerSession:
    """Server-side session state"""
    session_id: str
    client_info: Dict[str, Any]
    protocol_version: str
    initialized: bool
    created_at: datetime


class BaseMCPServer:
    """
    Base MCP Server.
    Provides the MCP protocol endpoints; subclasses register tools.
    """

    def __init__(self, name: str, port: int, description: str = "", version: str = "1.0.0", host: str = "0.0.0.0"):
        self.name = name
        self.port = port
        self.host = host
        self.description = description
        self.dispatcher = OperationDispatcher()

        self.protocol_version = SUPPORTED_PROTOCOL_VERSIONS[0]
        self.server_info = {
            "name": name,
            "version": version,
            "description": description
        }
        self.capabilities = {
            "tools": {"listChanged": False},
            "logging": {}
        }
        self.sessions: Dict[str, MCPServerSession] = {}
        self.session_timeout_seconds = int(os.getenv("MCP_SESSION_TIMEOUT", "3600"))
        self._cleanup_task: Optional[asyncio.Task] = None

        self.app = FastAPI(
            title=f"MCP Server: {name}",
            description=description,
            lifespan=self._lifespan
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._methods: Dict[str, Callable[[Dict, Request], Awaitable[Response]]] = {
            "initialize": self._handle_initialize,
            "notifications/initialized": self._handle_initialized,
            "notifications/cancelled": self._handle_cancelled,
            "ping": self._handle_ping,
            "tools/list": self._handle_tools_list,
            "tools/call": self._handle_tools_call,
        }
        self._setup_routes()

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        self._cleanup_task = asyncio.create_task(self._cleanup_expired_sessions())
        logger.info(f"MCP Server {self.name} started")
        try:
            yield
        finally:
            self._cleanup_task.cancel()
            await self.shutdown()
            logger.info(f"MCP Server {self.name} stopped")

    async def shutdown(self) -> None:
        """Release resources held by the server. Subclasses extend this."""
        pass

    def _setup_routes(self):
        """Setup MCP protocol routes"""

        @self.app.get("/health")
        async def health():
            return {"status": "healthy", "server": self.name}

        @self.app.post("/")
        async def mcp_endpoint(request: Request):
            """Main MCP endpoint - handles all JSON-RPC messages"""
            origin = request.headers.get("Origin")
            if origin and not self._is_valid_origin(origin):
                raise HTTPException(status_code=403, detail="Invalid Origin header")

            try:
                body = await request.json()
            except ValueError:
                return self._rpc_error(None, PARSE_ERROR, "Parse error")

            if not isinstance(body, dict) or body.get("jsonrpc") != "2.0":
                return self._rpc_error(None, INVALID_REQUEST, "Invalid JSON-RPC version")

            request_id = body.get("id")
            method = body.get("method")
            handler = self._methods.get(method) if isinstance(method, str) else None
            if handler is None:
                return self._rpc_error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

            # initialize negotiates its version in params instead of the header
            header_version = request.headers.get("MCP-Protocol-Version")
            if method != "initialize" and header_version and header_version not in SUPPORTED_PROTOCOL_VERSIONS:
                return self._rpc_error(
                    request_id, INVALID_REQUEST,
                    f"Unsupported protocol version: {header_version}. Supported: {SUPPORTED_PROTOCOL_VERSIONS}"
                )

            return await handler(body, request)

    async def _handle_ping(self, body: Dict, request: Request) -> JSONResponse:
        return JSONResponse(content={"jsonrpc": "2.0", "id": body.get("id"), "result": {}})

    async def _handle_initialize(self, body: Dict, request: Request) -> JSONResponse:
        """Handle initialize request"""
        request_id = body.get("id")
        params = body.get("params") or {}

        client_protocol = params.get("protocolVersion")
        client_info = params.get("clientInfo", {})

        if client_protocol not in SUPPORTED_PROTOCOL_VERSIONS:
            return self._rpc_error(
                request_id, INVALID_PARAMS, f"Unsupported protocol version: {client_protocol}",
                data={"supported": SUPPORTED_PROTOCOL_VERSIONS}
            )

        session_id = str(uuid.uuid4())
        self.sessions[session_id] = MCPServerSession(
            session_id=session_id,
            client_info=client_info,
            protocol_version=client_protocol,
            initialized=False,
            created_at=datetime.now()
        )
        logger.info(f"[{self.name}] New session {session_id} from {client_info.get('name', 'unknown client')}")

        response_data = {
            "jsonrpc": "2.0",
            "id": request_id,
            "result": {
                "protocolVersion": client_protocol,
                "capabilities": self.capabilities,
                "serverInfo": self.server_info
            }
        }

        return JSONResponse(content=response_data, headers={"MCP-Session-Id": session_id})

    async def _handle_initialized(self, body: Dict, request: Request) -> Response:
        """Handle initialized notification"""
        session_id = request.headers.get("MCP-Session-Id")

        if not session_id or session_id not in self.sessions:
            return self._rpc_error(None, INVALID_REQUEST, "Invalid or missing session ID")

        self.sessions[session_id].initialized = True
        return Response(status_code=202)

    async def _handle_cancelled(self, body: Dict, request: Request) -> Response:
        """Handle cancellation notification from client"""
        params = body.get("params") or {}
        request_id = params.get("requestId")
        reason = params.get("reason", "No reason provided")

        # In-flight n8n calls are not interrupted; they finish or time out.
        logger.info(f"[{self.name}] Client cancelled request {request_id}: {reason}")
        return Response(status_code=202)

    def _session_error(self, request_id: Any, request: Request) -> Optional[JSONResponse]:
        session_id = request.headers.get("MCP-Session-Id")
        if session_id and session_id not in self.sessions:
            return self._rpc_error(request_id, INVALID_REQUEST, "Session not found or expired", status_code=404)
        return None

    async def _handle_tools_list(self, body: Dict, request: Request) -> JSONResponse:
        """Handle tools/list request"""
        request_id = body.get("id")
        error = self._session_error(request_id, request)
        if error:
            return error

        # Wire format uses camelCase "inputSchema"
        tools = [
            {
                "name": tool.name,
                "description": tool.description,
                "inputSchema": tool.input_schema
            }
            for tool in self.dispatcher.tool_definitions
        ]

        return JSONResponse(content={
            "jsonrpc": "2.0",
            "id": request_id,
            "result": {"tools": tools}
        })

    async def _handle_tools_call(self, body: Dict, request: Request) -> JSONResponse:
        """Handle tools/call request"""
        request_id = body.get("id")
        error = self._session_error(request_id, request)
        if error:
            return error

        params = body.get("params") or {}
        outcome = await self.dispatcher.dispatch(params.get("name"), params.get("arguments"))
        return JSONResponse(content=self._render_outcome(request_id, outcome))

    def _render_outcome(self, request_id: Any, outcome: ToolOutcome) -> Dict:
        """Render a dispatcher outcome as a JSON-RPC response"""
        if outcome.error:
            return self._build_error_response(request_id, outcome.error.code, outcome.error.message)

        result: Dict[str, Any] = {"content": [{"type": "text", "text": outcome.text}]}
        if outcome.is_error:
            result["isError"] = True
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    def _build_error_response(self, request_id: Any, code: int, message: str, data: Optional[Dict] = None) -> Dict:
        """Build JSON-RPC error response"""
        error = {"code": code, "message": message}
        if data:
            error["data"] = data
        return {"jsonrpc": "2.0", "id": request_id, "error": error}

    def _rpc_error(self, request_id: Any, code: int, message: str,
                   status_code: int = 400, data: Optional[Dict] = None) -> JSONResponse:
        return JSONResponse(status_code=status_code,
                            content=self._build_error_response(request_id, code, message, data))

    def _is_valid_origin(self, origin: str) -> bool:
        """Validate Origin header to prevent DNS rebinding attacks"""
        try:
            hostname = urlparse(origin).hostname
        except ValueError:
            return False

        configured = (urlparse(entry.strip()).hostname for entry in os.getenv("MCP_ALLOWED_ORIGINS", "").split(","))
        return hostname in LOOPBACK_HOSTS | {host for host in configured if host}

    def expire_sessions(self, now: Optional[datetime] = None) -> List[str]:
        """Drop sessions older than the session timeout and return their IDs"""
        now = now or datetime.now()
        expired = [
            session_id
            for session_id, session in self.sessions.items()
            if (now - session.created_at).total_seconds() > self.session_timeout_seconds
        ]
        for session_id in expired:
            del self.sessions[session_id]
            logger.info(f"[{self.name}] Cleaned up expired session: {session_id}")
        return expired

    async def _cleanup_expired_sessions(self):
        while True:
            await asyncio.sleep(300)
            self.expire_sessions()

    def register_tool(
        self,
        name: str,
        handler: Handler,
        description: str,
        input_schema: Dict[str, Any]
    ):
        """Register a tool with this MCP server"""
        self.dispatcher.register(name, handler, description, input_schema)
        logger.info(f"[{self.name}] Registered tool: {name}")

    def run(self):
        """Start the MCP server"""
        logger.info(f"Starting MCP Server: {self.name} on {self.host}:{self.port}")
        uvicorn.run(self.app, host=self.host, port=self.port, log_config=None)
