"""
MCP Server setup and registration for the PDF Extractor.

Handles server construction, tool registration, resource setup, and
JSON-RPC communication over stdio.
"""

import json
import logging
from typing import Any, Dict, Optional

# MCP imports
try:
    from mcp.server import Server
    from mcp.types import CallToolResult, Resource, Tool
except ImportError as exc:  # pragma: no cover
    raise ImportError("MCP library not installed. Install with: pip install mcp") from exc

from . import __version__
from .config import ExtractorConfig, load_config_from_env
from .errors import exception_result
from .extractor import PDFExtractor
from .tools import TOOL_METADATA, dispatch_tool

logger = logging.getLogger(__name__)

SERVER_NAME = "pdf-extractor"
STATUS_URI = "pdf-extractor://server-status"


def list_tool_definitions() -> list[Tool]:
    """Build the Tool declarations advertised to clients."""
    return [
        Tool(
            name=tool_name,
            description=metadata["description"],
            inputSchema=metadata["inputSchema"]
        )
        for tool_name, metadata in TOOL_METADATA.items()
    ]


def server_status(config: ExtractorConfig) -> Dict[str, Any]:
    """Non-secret description of the running server."""
    return {
        "server_name": SERVER_NAME,
        "version": __version__,
        "tools_available": len(TOOL_METADATA),
        "tool_names": list(TOOL_METADATA.keys()),
        "transport": "stdio",
        "image_formats": ["png", "jpeg"],
        "default_dpi": config.default_dpi,
        "max_dpi": config.max_dpi,
        "jpeg_quality": config.jpeg_quality,
        "max_file_size_mb": round(config.max_file_size_bytes / (1024 * 1024), 1),
        "path_restriction_enabled": not config.allow_any_path,
    }


def create_server(extractor: Optional[PDFExtractor] = None, config: Optional[ExtractorConfig] = None) -> Server:
    """
    Build an MCP server whose handlers close over one PDFExtractor.

    Args:
        extractor: Extraction core to serve, built from config when omitted
        config: Settings used when extractor is omitted

    Returns:
        A configured, not yet running, Server
    """
    if extractor is None:
        extractor = PDFExtractor(config or ExtractorConfig())
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List all available PDF extraction tools."""
        tools = list_tool_definitions()
        logger.info(f"Listed {len(tools)} PDF extraction tools")
        return tools

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> CallToolResult:
        """Execute a tool; failures become error-flagged text content."""
        logger.info(f"Tool called: {name} args={json.dumps(arguments, default=str)}")
        try:
            result = await dispatch_tool(extractor, name, arguments or {})
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(f"Tool {name} failed with unexpected exception: {e}")
            result = exception_result(e)

        logger.info(f"Tool {name} completed error={bool(result.isError)} blocks={len(result.content)}")
        return result

    @server.list_resources()
    async def list_resources() -> list[Resource]:
        """List available resources."""
        return [
            Resource(
                uri=STATUS_URI,
                name="Server Status",
                description="Server version, tools and extraction limits",
                mimeType="application/json",
            )
        ]

    @server.read_resource()
    async def read_resource(uri: Any) -> str:
        """Read resource content."""
        uri_s = uri if isinstance(uri, str) else str(uri)
        logger.info(f"Resource requested: {uri_s}")

        if uri_s == STATUS_URI:
            return json.dumps(server_status(extractor.config), indent=2)

        raise ValueError(f"Unknown resource URI: {uri_s}")

    return server


async def run_server(config: Optional[ExtractorConfig] = None) -> None:
    """Run the PDF Extractor MCP Server over stdio."""
    config = config or load_config_from_env()
    server = create_server(PDFExtractor(config))

    logger.info("Starting PDF Extractor MCP Server...")
    logger.info(f"Registered tools: {', '.join(TOOL_METADATA.keys())}")

    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        logger.info("PDF Extractor MCP Server running on stdio")
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options()
        )
