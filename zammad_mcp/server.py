"""
server.py — Low-level MCP server for Zammad
============================================
What this file does:
  1. Creates a low-level mcp Server around an injected ZammadClient
  2. Registers list_tools / call_tool and the resource handlers
  3. Serves over stdio (default) or streamable HTTP (Starlette + uvicorn at /mcp)
  4. main(): loads config, checks the Zammad connection, then serves

The tools themselves live in tools/ and the resources in resources.py; this
file only wires them up and maps errors onto MCP:
  - ToolError          → tool result with isError=True (the assistant sees it)
  - SerializationError → protocol-level error (a bug, not a user problem)
"""

import argparse
import asyncio
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from mcp import types
from mcp.server.lowlevel import NotificationOptions, Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from mcp.shared.exceptions import McpError
from pydantic import AnyUrl
from starlette.applications import Starlette
from starlette.routing import Mount

from zammad_mcp import __version__
from zammad_mcp.client import ZammadClient
from zammad_mcp.config import Settings, load_settings
from zammad_mcp.errors import (
    RESOURCE_NOT_FOUND,
    ConfigError,
    ResourceNotFound,
    SerializationError,
    ToolError,
)
from zammad_mcp.logger import get_logger, setup_logging
from zammad_mcp.resources import MIME_TYPE, read_resource, resource_templates, resources
from zammad_mcp.tools import build_tools

logger = get_logger(__name__)

SERVER_NAME = "Zammad MCP Server"
INSTRUCTIONS = (
    "This server provides access to Zammad tickets, users, tags and text modules "
    "via resources and tools (e.g., create_ticket, get_ticket, search_tickets, "
    "reply_to_ticket, close_ticket, assign_ticket, get_user, search_users, "
    "add_tag_to_ticket, get_ticket_tags, search_text_modules)."
)


# ── Lifespan ──────────────────────────────────────────────────────────────────
# Runs around each server session. The Zammad client is owned by serve(), so
# there is nothing to open or close here.

@asynccontextmanager
async def server_lifespan(server: Server) -> AsyncIterator[dict]:
    logger.info("Zammad MCP session starting...")
    try:
        yield {}
    finally:
        logger.info("Zammad MCP session closed.")


# ── MCP Server ────────────────────────────────────────────────────────────────

def build_server(client: ZammadClient) -> Server:
    """Create the MCP server with every tool and resource bound to `client`."""
    tools = build_tools(client)
    server = Server(
        SERVER_NAME, version=__version__, instructions=INSTRUCTIONS, lifespan=server_lifespan
    )

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        """Return all tools from the registry to any connecting client."""
        return [entry["tool"] for entry in tools.values()]

    async def handle_call_tool(req: types.CallToolRequest) -> types.ServerResult:
        """
        Dispatch an incoming tool call to the correct handler.

        Installed directly instead of via @server.call_tool(): the decorator
        turns every exception into a tool result, and encoding failures must
        reach the client as protocol errors.
        """
        name = req.params.name
        logger.info(f"Handling tool call: {name}")
        if name not in tools:
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=f"Unknown tool: {name}"))

        handler = tools[name]["handler"]
        try:
            content = await handler(req.params.arguments or {})
        except ToolError as e:
            logger.warning(f"Tool {name} failed: {e}")
            return types.ServerResult(
                types.CallToolResult(content=[types.TextContent(type="text", text=str(e))], isError=True)
            )
        except SerializationError as e:
            logger.error(f"Tool {name}: {e}")
            raise McpError(types.ErrorData(code=types.INTERNAL_ERROR, message=str(e))) from e

        return types.ServerResult(types.CallToolResult(content=content, isError=False))

    server.request_handlers[types.CallToolRequest] = handle_call_tool

    @server.list_resources()
    async def handle_list_resources() -> list[types.Resource]:
        return resources

    @server.list_resource_templates()
    async def handle_list_resource_templates() -> list[types.ResourceTemplate]:
        return resource_templates

    @server.read_resource()
    async def handle_read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
        try:
            data = await read_resource(client, str(uri))
        except ResourceNotFound as e:
            raise McpError(
                types.ErrorData(code=RESOURCE_NOT_FOUND, message=f"resource not found: {e}", data={"uri": str(uri)})
            ) from e
        except (ToolError, SerializationError) as e:
            raise McpError(types.ErrorData(code=types.INTERNAL_ERROR, message=str(e))) from e
        return [ReadResourceContents(content=data, mime_type=MIME_TYPE)]

    return server


# ── Transports ────────────────────────────────────────────────────────────────

async def run_stdio(server: Server) -> None:
    logger.info("Starting Zammad MCP server via stdio...")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(notification_options=NotificationOptions()),
        )


def build_http_app(server: Server) -> Starlette:
    """
    Starlette app with the streamable HTTP transport mounted at /mcp.
    Each client connection gets its own session.
    """
    session_manager = StreamableHTTPSessionManager(server)

    @asynccontextmanager
    async def app_lifespan(app: Starlette):
        async with session_manager.run():
            yield

    return Starlette(
        routes=[
            Mount("/mcp", app=session_manager.handle_request),
        ],
        lifespan=app_lifespan,
    )


async def run_http(server: Server, host: str, port: int) -> None:
    logger.info(f"Server is running on http://{host}:{port}/mcp")
    config = uvicorn.Config(build_http_app(server), host=host, port=port, log_level="info")
    await uvicorn.Server(config).serve()


# ── Entry point ───────────────────────────────────────────────────────────────

async def serve(settings: Settings) -> None:
    """Check the Zammad connection, then serve until the transport closes."""
    async with ZammadClient.from_settings(settings) as client:
        try:
            me = await client.me()
        except ToolError as e:
            logger.error(f"Failed to connect to Zammad API: {e}")
            raise SystemExit(1) from e
        logger.info(f"Successfully connected to Zammad API as '{me.login}'.")

        server = build_server(client)
        if settings.mcp_transport == "http":
            await run_http(server, settings.mcp_host, settings.mcp_port)
        else:
            await run_stdio(server)


def main() -> None:
    parser = argparse.ArgumentParser(description="MCP server for the Zammad helpdesk")
    parser.add_argument("--transport", choices=["stdio", "http"], help="MCP transport (default: stdio)")
    parser.add_argument("--host", help="Bind address for the http transport")
    parser.add_argument("--port", type=int, help="Port for the http transport")
    parser.add_argument("--env-file", help="dotenv file to load (default: .env)")
    args = parser.parse_args()

    try:
        settings = load_settings(
            args.env_file, mcp_transport=args.transport, mcp_host=args.host, mcp_port=args.port
        )
    except ConfigError as e:
        setup_logging()
        logger.error(f"Error: {e}")
        sys.exit(1)

    setup_logging(settings.log_level)
    asyncio.run(serve(settings))


if __name__ == "__main__":
    main()
