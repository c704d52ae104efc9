"""Entry point for running the MCP server.

Usage:
    python -m jira_mcp                        # Default tool modules over stdio
    python -m jira_mcp --tools jira_core      # Load specific tool modules
    python -m jira_mcp --transport http       # Serve over HTTP at /mcp
"""

from .main import main

if __name__ == "__main__":
    main()
