#!/usr/bin/env python3
"""
MCP Server for Google Analytics 4 reporting.
Exposes the operation registry as MCP tools over stdio.
"""

import argparse
import asyncio
import logging
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from .client import AnalyticsContext
from .config import configure_logging, load_settings
from .handler import InvocationHandler, ToolResult
from .operations import Operation

SERVER_NAME = "ga4-analytics-server"
SERVER_VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def tool_definition(operation: Operation) -> types.Tool:
    return types.Tool(
        name=operation.name,
        description=operation.description,
        inputSchema=operation.input_schema,
    )


def to_call_tool_result(result: ToolResult) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=result.text)],
        isError=result.is_error,
    )


def create_server(handler: InvocationHandler) -> Server:
    """Wire tools/list and tools/call to the invocation handler"""
    server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [tool_definition(operation) for operation in handler.catalog()]

    # Arguments go through unvalidated; the GA4 API is the judge of bad input
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> types.CallToolResult:
        loop = asyncio.get_running_loop()
        # The GA4 client is blocking; keep the event loop free
        result = await loop.run_in_executor(None, handler.handle, name, arguments or {})
        return to_call_tool_result(result)

    return server


async def serve(handler: InvocationHandler) -> None:
    server = create_server(handler)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="GA4 Analytics MCP Server (stdio)")
    parser.add_argument("--credentials", help="Path to service account JSON (default: $GOOGLE_APPLICATION_CREDENTIALS)")
    parser.add_argument("--property-id", help="Default GA4 property ID used when a call omits propertyId (default: $GA_PROPERTY_ID)")
    parser.add_argument("--env-file", help="Path to a .env file to load")
    parser.add_argument("--debug", action="store_true", default=None, help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    settings = load_settings(
        credentials_path=args.credentials,
        property_id=args.property_id,
        debug=args.debug,
        env_file=args.env_file,
    )
    configure_logging(settings.debug)

    context = AnalyticsContext(settings)
    handler = InvocationHandler(context)

    logger.info(f"Starting {SERVER_NAME} {SERVER_VERSION} on stdio with {len(handler.catalog())} tools")
    asyncio.run(serve(handler))


if __name__ == "__main__":
    main()
