"""Tool modules loaded by the MCP server (see jira_mcp.tool_paths)."""
