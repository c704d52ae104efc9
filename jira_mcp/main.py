"""MCP Server - Main Entry Point.

Creates a FastMCP server, loads the requested tool modules from
tool_modules/ and serves them over stdio or streamable HTTP.

Usage:
    # Default tools (server.tools in config.json, else jira_core + jira_extra):
    python -m jira_mcp

    # Only the issue creation workflow:
    python -m jira_mcp --tools jira_core

    # Serve over HTTP at http://127.0.0.1:8000/mcp:
    python -m jira_mcp --transport http --port 8000
"""

import argparse
import asyncio
import importlib
import logging
import sys

from fastmcp import FastMCP

from .config_manager import VALID_TRANSPORTS, ConfigValidationError, config
from .tool_paths import get_available_modules, get_tools_module_name, split_module_name

DEFAULT_TOOLS = ["jira_core", "jira_extra"]


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure logging for MCP server.

    Logs go to stderr since stdout is reserved for JSON-RPC in stdio mode.
    """
    stream_handler = logging.StreamHandler(sys.stderr)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(name)s - %(levelname)s - %(message)s",
        handlers=[stream_handler],
    )
    return logging.getLogger(__name__)


def _load_single_tool_module(module_name: str, server: FastMCP) -> int:
    """
    Import a tool module and register its tools.

    Args:
        module_name: Tool module name (e.g., "jira_core")
        server: FastMCP server instance

    Returns:
        Number of tools registered, 0 if the module has no register_tools
    """
    logger = logging.getLogger(__name__)

    module = importlib.import_module(get_tools_module_name(module_name))

    if not hasattr(module, "register_tools"):
        logger.warning(f"Module {module_name} has no register_tools function")
        return 0

    count = module.register_tools(server)
    logger.info(f"Loaded {module_name}: {count} tools")
    return count


def _canonical_module_name(module_name: str) -> str:
    base_name, variant = split_module_name(module_name)
    return f"{base_name}_{variant}"


def create_mcp_server(
    name: str = "jira-mcp",
    tools: list[str] | None = None,
) -> FastMCP:
    """
    Create and configure an MCP server with the specified tools.

    Args:
        name: Server name for identification
        tools: Tool module names to load (e.g., ["jira_core"]).
               If None, loads all available modules.

    Returns:
        Configured FastMCP server instance
    """
    logger = logging.getLogger(__name__)
    server = FastMCP(name)

    available_modules = get_available_modules()
    if tools is None:
        tools = sorted(available_modules)

    loaded_modules: list[str] = []
    total_tools = 0

    for requested in tools:
        module_name = _canonical_module_name(requested)
        if module_name in loaded_modules:
            continue
        if module_name not in available_modules:
            logger.warning(f"Unknown tool module: {requested}. Available: {sorted(available_modules)}")
            continue

        try:
            count = _load_single_tool_module(module_name, server)
        except Exception as e:
            logger.error(f"Error loading {module_name}: {e}")
            continue

        if count:
            loaded_modules.append(module_name)
            total_tools += count

    logger.info(f"Server ready with {total_tools} tools from {len(loaded_modules)} modules: {loaded_modules}")
    return server


async def run_mcp_server(
    server: FastMCP,
    transport: str = "stdio",
    host: str = "127.0.0.1",
    port: int = 8000,
    path: str = "/mcp",
):
    """Run the MCP server.

    Args:
        server: FastMCP server instance
        transport: "stdio" (for AI integrations) or "http"
        host: Bind address for http transport
        port: Port for http transport
        path: Endpoint path for http transport
    """
    logger = logging.getLogger(__name__)

    if transport == "http":
        logger.info(f"Starting MCP server (http mode) on http://{host}:{port}{path}")
        await server.run_http_async(host=host, port=port, path=path)
    else:
        logger.info("Starting MCP server (stdio mode)...")
        await server.run_stdio_async()


def _default_tools() -> list[str]:
    configured = config.get("server", "tools")
    if isinstance(configured, list) and configured:
        return [str(t) for t in configured]
    return list(DEFAULT_TOOLS)


def main():
    """Main entry point with tool selection."""
    available = sorted(get_available_modules())

    parser = argparse.ArgumentParser(
        description="Jira MCP Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Available tool modules:
  {', '.join(available)}

Examples:
  python -m jira_mcp                              # Default tool modules over stdio
  python -m jira_mcp --tools jira_core            # Issue creation tools only
  python -m jira_mcp --transport http --port 8000 # Serve at http://127.0.0.1:8000/mcp
        """,
    )
    parser.add_argument(
        "--tools",
        type=str,
        default="",
        help="Comma-separated list of tool modules to load",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Load all available tool modules",
    )
    parser.add_argument(
        "--name",
        default="",
        help="Server name (default: server.name from config, or 'jira-mcp')",
    )
    parser.add_argument(
        "--transport",
        choices=VALID_TRANSPORTS,
        default=None,
        help="Transport to serve on (default: server.transport from config, or stdio)",
    )
    parser.add_argument("--host", default=None, help="Bind address for http transport")
    parser.add_argument("--port", type=int, default=None, help="Port for http transport")
    parser.add_argument("--path", default=None, help="Endpoint path for http transport")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.json (default: $JIRA_MCP_CONFIG, ./config.json, ~/.config/jira-mcp/config.json)",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")

    args = parser.parse_args()
    logger = setup_logging(args.log_level)

    if args.config:
        config.use_file(args.config)
    logger.info(f"Using config file {config.config_file}")

    try:
        config.validate_or_raise()
    except ConfigValidationError as e:
        for error in e.errors:
            logger.warning(f"Config: {error}")

    if args.all:
        tools = None
    elif args.tools:
        tools = [t.strip() for t in args.tools.split(",") if t.strip()]
    else:
        tools = _default_tools()

    server_name = args.name or config.get_with_default("server", "name")
    transport = args.transport or config.get_with_default("server", "transport")
    host = args.host or config.get_with_default("server", "host")
    port = args.port or config.get_with_default("server", "port")
    path = args.path or config.get_with_default("server", "path")

    try:
        server = create_mcp_server(name=server_name, tools=tools)
        asyncio.run(run_mcp_server(server, transport=transport, host=host, port=port, path=path))
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
