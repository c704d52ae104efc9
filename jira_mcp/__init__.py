"""Jira MCP server: Jira Cloud issue tools over the Model Context Protocol."""

__version__ = "0.1.0"
