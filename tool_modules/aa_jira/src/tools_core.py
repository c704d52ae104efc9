"""Jira core tools - the issue creation workflow.

This module provides the minimal set of Jira tools:
- list_issue_types: List all available issue types
- get_user: Get a user's account ID by email address
- create_issue: Create a new issue or subtask

For search, updates, links and projects, load jira_extra.
"""

import logging

from fastmcp import FastMCP

from jira_mcp.config_manager import config
from jira_mcp.errors import ErrorCodes, tool_error, tool_json
from jira_mcp.tool_registry import ToolRegistry
from tool_modules.aa_jira.src.adf import text_to_adf
from tool_modules.aa_jira.src.client import find_user, get_jira_client, not_configured_error, resolve_account_id

logger = logging.getLogger(__name__)


# ==================== TOOL IMPLEMENTATIONS ====================


async def _list_issue_types_impl() -> str:
    """Implementation of list_issue_types tool."""
    client = get_jira_client()
    if client is None:
        return not_configured_error()

    async with client:
        success, data = await client.get("issuetype")

    if not success:
        logger.warning(f"Failed to fetch issue types: {data}")
        return tool_error("Error fetching issue types", error=data, code=ErrorCodes.JIRA_API_ERROR)

    issue_types = [
        {
            "id": issue_type.get("id"),
            "name": issue_type.get("name"),
            "description": issue_type.get("description") or "No description available",
            "subtask": issue_type.get("subtask") or False,
        }
        for issue_type in data or []
    ]
    return tool_json(issue_types)


async def _get_user_impl(email: str) -> str:
    """Implementation of get_user tool."""
    client = get_jira_client()
    if client is None:
        return not_configured_error()

    async with client:
        success, user = await find_user(client, email)

    if not success:
        logger.warning(f"Failed to look up user {email}: {user}")
        return tool_error("Error fetching user", error=str(user), code=ErrorCodes.JIRA_API_ERROR)

    if user is None:
        return tool_error(f"No user found with email: {email}", code=ErrorCodes.NOT_FOUND)

    return tool_json(
        {
            "accountId": user.get("accountId"),
            "displayName": user.get("displayName"),
            "emailAddress": user.get("emailAddress"),
        }
    )


def _build_issue_fields(
    project_key: str,
    summary: str,
    issue_type: str,
    description: str = "",
    labels: list[str] | None = None,
    components: list[str] | None = None,
    priority: str = "",
    parent: str = "",
) -> dict:
    """Build the ``fields`` object of a create-issue payload.

    Optional fields are left out entirely when not supplied.
    """
    fields: dict = {
        "project": {"key": project_key},
        "summary": summary,
        "issuetype": {"name": issue_type},
    }
    if description:
        fields["description"] = text_to_adf(description)
    if labels:
        fields["labels"] = labels
    if components:
        fields["components"] = [{"name": name} for name in components]
    if priority:
        fields["priority"] = {"name": priority}
    if parent:
        fields["parent"] = {"key": parent}
    return fields


async def _create_issue_impl(
    project_key: str,
    summary: str,
    issue_type: str,
    description: str = "",
    assignee: str = "",
    labels: list[str] | None = None,
    components: list[str] | None = None,
    priority: str = "",
    parent: str = "",
) -> str:
    """Implementation of create_issue tool.

    Calls POST /rest/api/3/issue. The description is converted to ADF and
    an email assignee is resolved to an account id first.
    """
    client = get_jira_client()
    if client is None:
        return not_configured_error()

    project_key = project_key or config.get_with_default("defaults", "project_key")
    assignee = assignee or config.get_with_default("defaults", "assignee") or ""

    fields = _build_issue_fields(
        project_key,
        summary,
        issue_type,
        description=description,
        labels=labels,
        components=components,
        priority=priority,
        parent=parent,
    )

    async with client:
        if assignee:
            resolved, account_id = await resolve_account_id(client, assignee)
            if not resolved:
                return tool_error("Error creating issue", error=account_id, code=ErrorCodes.NOT_FOUND)
            fields["assignee"] = {"accountId": account_id}

        success, data = await client.post("issue", json={"fields": fields})

    if not success:
        logger.warning(f"Failed to create issue in {project_key}: {data}")
        return tool_error(
            "Error creating issue",
            error=data,
            code=ErrorCodes.JIRA_API_ERROR,
            context={"project": project_key},
        )

    logger.info(f"Created issue {data['key']}")
    return tool_json(
        {
            "message": "Issue created successfully",
            "issue": {
                "id": data["id"],
                "key": data["key"],
                "url": client.browse_url(data["key"]),
            },
        }
    )


def register_tools(server: FastMCP) -> int:
    """Register core Jira tools with the MCP server."""
    registry = ToolRegistry(server)

    @registry.tool()
    async def list_issue_types() -> str:
        """
        List all available issue types in Jira.

        Returns:
            JSON list of issue types with id, name, description and subtask flag.
        """
        return await _list_issue_types_impl()

    @registry.tool()
    async def get_user(email: str) -> str:
        """
        Get a user's account ID by email address.

        Args:
            email: Email address of the user to look up

        Returns:
            JSON with accountId, displayName and emailAddress.
        """
        return await _get_user_impl(email)

    @registry.tool()
    async def create_issue(
        project_key: str,
        summary: str,
        issue_type: str,
        description: str = "",
        assignee: str = "",
        labels: list[str] | None = None,
        components: list[str] | None = None,
        priority: str = "",
        parent: str = "",
    ) -> str:
        """
        Create a new Jira issue or subtask.

        Args:
            project_key: Key of the project to create the issue in
            summary: Issue title/summary
            issue_type: Type of issue (e.g., "Task", "Story", "Subtask")
            description: Optional plain-text description. Lines starting with "- "
                or "1. " become lists; a line underlined with "===" or "---"
                becomes a heading.
            assignee: Optional email or account ID of the assignee
            labels: Optional labels to apply
            components: Optional component names
            priority: Optional priority name (e.g., "High")
            parent: Optional parent issue key (required for subtasks)

        Returns:
            JSON with the new issue's id, key and browse URL.
        """
        return await _create_issue_impl(
            project_key,
            summary,
            issue_type,
            description=description,
            assignee=assignee,
            labels=labels,
            components=components,
            priority=priority,
            parent=parent,
        )

    logger.info(f"Registered {registry.count} core Jira tools")
    return registry.count
