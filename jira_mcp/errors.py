"""Standardized result formatting for Jira MCP tools.

Tool handlers never raise for Jira or network failures; they return one of
these strings so the calling agent always gets a readable answer.

Usage:
    from jira_mcp.errors import ErrorCodes, tool_error, tool_success

    return tool_error("Error creating issue", error=msg, code=ErrorCodes.JIRA_API_ERROR)
    return tool_success("Issue CPG-12 updated", data={"fields": ["summary"]})
"""

import json
from typing import Any


class ErrorCodes:
    """Standard error codes for tool responses."""

    # Authentication
    AUTH_FAILED = "AUTH_FAILED"

    # Resource errors
    NOT_FOUND = "NOT_FOUND"

    # Operation errors
    INVALID_INPUT = "INVALID_INPUT"

    # Remote errors
    JIRA_API_ERROR = "JIRA_API_ERROR"


def _format_context(context: dict[str, Any]) -> str:
    return ", ".join(f"{k}={v}" for k, v in context.items())


def tool_error(
    message: str,
    error: str | None = None,
    code: str | None = None,
    context: dict[str, Any] | None = None,
    hint: str | None = None,
) -> str:
    """Create a standardized error response string.

    Args:
        message: Main error message (shown prominently)
        error: Detailed error text (e.g., the Jira API error)
        code: Error code from ErrorCodes
        context: Additional context (e.g., {"issue_key": "CPG-1"})
        hint: Helpful hint for resolving the error

    Returns:
        Formatted error string with ❌ prefix

    Examples:
        >>> tool_error("Error fetching user", code="NOT_FOUND")
        '❌ Error fetching user [NOT_FOUND]'
    """
    parts = [f"❌ {message}"]

    if code:
        parts.append(f" [{code}]")

    if error:
        parts.append(f"\n**Error:** {error}")

    if context:
        parts.append(f"\n**Context:** {_format_context(context)}")

    if hint:
        parts.append(f"\n💡 **Hint:** {hint}")

    return "".join(parts)


def tool_success(
    message: str,
    data: dict[str, Any] | None = None,
) -> str:
    """Create a standardized success response string.

    Args:
        message: Main success message
        data: Result data; lists and dicts are rendered as JSON blocks

    Returns:
        Formatted success string with ✅ prefix
    """
    parts = [f"✅ {message}"]

    if data:
        for key, value in data.items():
            if isinstance(value, (list, dict)):
                formatted = json.dumps(value, indent=2)
                parts.append(f"\n**{key}:**\n```\n{formatted}\n```")
            else:
                parts.append(f"\n**{key}:** {value}")

    return "".join(parts)


def tool_json(payload: Any) -> str:
    """Render a tool payload as pretty-printed JSON text."""
    return json.dumps(payload, indent=2)
