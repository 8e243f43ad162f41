"""MCP server implementation."""
import asyncio
import json
from typing import Any, Dict, List

import mcp.types as types
from mcp.server import stdio
from mcp.server.lowlevel import Server
from mcp.server.models import InitializationOptions

from mcp_spark_dist import __version__, distribution
from mcp_spark_dist.logging import configure_logging, get_logger
from mcp_spark_dist.types import VersionEntry

logger = get_logger("server")

VERSION_PROPERTIES = {
    "runtime_version": {"type": "string", "description": "Spark version, e.g. 1.6.2"},
    "platform_version": {"type": "string", "description": "Hadoop version, e.g. 2.6"},
}

tools = [
    types.Tool(
        name="spark_install",
        description="Download and install a Spark version for local connections",
        inputSchema={
            "type": "object",
            "properties": {
                **VERSION_PROPERTIES,
                "reset": {
                    "type": "boolean",
                    "description": "Reset configuration files to their defaults",
                },
                "logging_level": {
                    "type": "string",
                    "description": "log4j root level to configure, e.g. WARN or INFO",
                },
            },
        },
    ),
    types.Tool(
        name="spark_uninstall",
        description="Remove an installed Spark version",
        inputSchema={
            "type": "object",
            "properties": VERSION_PROPERTIES,
            "required": ["runtime_version", "platform_version"],
        },
    ),
    types.Tool(
        name="spark_list_versions",
        description="List known Spark versions and whether they are installed",
        inputSchema={
            "type": "object",
            "properties": {
                "installed_only": {"type": "boolean"},
                "latest": {"type": "boolean"},
            },
        },
    ),
    types.Tool(
        name="spark_default_version",
        description="Show the Spark version used when none is specified",
        inputSchema={"type": "object", "properties": {}},
    ),
    types.Tool(
        name="spark_install_dir",
        description="Show the directory Spark versions are installed into",
        inputSchema={"type": "object", "properties": {}},
    ),
]


def entry_to_dict(entry: VersionEntry) -> Dict[str, Any]:
    return {
        "spark": entry.runtime_version,
        "hadoop": entry.platform_version,
        "default": entry.is_default,
        "hadoop_default": entry.is_platform_default,
        "latest": entry.latest,
        "installed": entry.installed,
    }


def text_result(payload: Dict[str, Any]) -> List[types.TextContent]:
    return [types.TextContent(type="text", text=json.dumps(payload))]


async def handle_tool_call(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
    """Dispatch one tool call; errors become ``success: false`` payloads."""
    arguments = arguments or {}
    try:
        logger.debug(f"Tool call received: {name} with arguments {arguments}")

        if name == "spark_install":
            result = await distribution.install(
                arguments.get("runtime_version"),
                arguments.get("platform_version"),
                reset=arguments.get("reset", False),
                logging_level=arguments.get("logging_level", "INFO"),
            )
            return text_result(
                {
                    "success": True,
                    "data": {
                        **result.descriptor.to_dict(),
                        "outcome": result.outcome.name,
                        "warnings": result.warnings,
                    },
                }
            )

        elif name == "spark_uninstall":
            outcome = distribution.uninstall(
                arguments["runtime_version"], arguments["platform_version"]
            )
            return text_result({"success": True, "data": {"outcome": outcome.name}})

        elif name == "spark_list_versions":
            versions = distribution.list_versions(
                installed_only=arguments.get("installed_only", False),
                latest=arguments.get("latest", False),
            )
            return text_result(
                {"success": True, "data": [entry_to_dict(v) for v in versions]}
            )

        elif name == "spark_default_version":
            descriptor = distribution.resolve_default()
            return text_result({"success": True, "data": descriptor.to_dict()})

        elif name == "spark_install_dir":
            return text_result(
                {"success": True, "data": {"install_dir": str(distribution.install_root())}}
            )

        return text_result({"success": False, "error": f"Unknown tool: {name}"})

    except Exception as e:
        logger.error(f"Tool call failed: {name}: {e}")
        return text_result({"success": False, "error": str(e)})


async def init_server() -> Server:
    logger.info(f"Registered tools: {', '.join(t.name for t in tools)}")

    server = Server("mcp-spark-dist")

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        logger.debug("Tools requested")
        return tools

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        return await handle_tool_call(name, arguments)

    return server


async def serve() -> None:
    configure_logging()
    logger.info("Starting MCP Spark distribution server")
    server = await init_server()
    async with stdio.stdio_server() as (read_stream, write_stream):
        init_options = InitializationOptions(
            server_name="mcp-spark-dist",
            server_version=__version__,
            capabilities=types.ServerCapabilities(
                tools=types.ToolsCapability(listChanged=False),
                logging=types.LoggingCapability(),
            ),
        )
        await server.run(read_stream, write_stream, init_options)


def main() -> None:
    """Run the MCP server."""
    asyncio.run(serve())
