"""Tool registration wrapper around FastMCP.

Tool modules register through a ToolRegistry instead of calling
``server.tool()`` directly so the server can report what each module added.

Usage:
    registry = ToolRegistry(server)

    @registry.tool()
    async def list_issue_types() -> str:
        ...

    logger.info(f"Registered {registry.count} tools")
"""

from collections.abc import Callable
from typing import Any

from fastmcp import FastMCP


class ToolRegistry:
    """Tracks tool names as they are registered on a FastMCP server."""

    def __init__(self, server: FastMCP):
        self.server = server
        self.tools: list[str] = []

    def tool(self, **kwargs: Any) -> Callable:
        """Decorator forwarding to ``server.tool(**kwargs)``.

        The tool name is ``kwargs["name"]`` when given, otherwise the
        function name.
        """

        def decorator(func: Callable) -> Any:
            self.tools.append(kwargs.get("name", func.__name__))
            return self.server.tool(**kwargs)(func)

        return decorator

    @property
    def count(self) -> int:
        return len(self.tools)
