"""Jira extra tools - search, updates, links and projects.

Tools:
- get_issues: List issues in a project, optionally narrowed by JQL
- update_issue: Update fields and/or transition an issue
- create_issue_link: Link two issues
- create_project: Create a new project
"""

import logging
import re

from fastmcp import FastMCP

from jira_mcp.errors import ErrorCodes, tool_error, tool_json, tool_success
from jira_mcp.tool_registry import ToolRegistry
from tool_modules.aa_jira.src.adf import text_to_adf
from tool_modules.aa_jira.src.client import JiraClient, get_jira_client, not_configured_error, resolve_account_id

logger = logging.getLogger(__name__)

SEARCH_FIELDS = "summary,status,assignee,issuetype"
ORDER_BY_RE = re.compile(r"(?:^|\s)ORDER\s+BY\s+(.+)$", re.IGNORECASE | re.DOTALL)


def _build_jql(project_key: str, jql: str = "") -> str:
    """Scope a JQL filter to one project, keeping any trailing ORDER BY."""
    query = f'project = "{project_key}"'
    order_by = ""

    match = ORDER_BY_RE.search(jql)
    if match:
        order_by = f" ORDER BY {match.group(1).strip()}"
        jql = jql[: match.start()]

    if jql.strip():
        return f"{query} AND ({jql.strip()}){order_by}"
    return query + (order_by or " ORDER BY created DESC")


def _summarize_issue(issue: dict) -> dict:
    fields = issue.get("fields", {})
    assignee = fields.get("assignee") or {}
    return {
        "key": issue.get("key"),
        "summary": fields.get("summary"),
        "status": (fields.get("status") or {}).get("name"),
        "assignee": assignee.get("displayName", "Unassigned"),
        "issue_type": (fields.get("issuetype") or {}).get("name"),
    }


async def _get_issues_impl(project_key: str, jql: str = "", max_results: int = 50) -> str:
    """Implementation of get_issues tool.

    Calls GET /rest/api/3/search/jql. Only the first page is returned.
    """
    client = get_jira_client()
    if client is None:
        return not_configured_error()

    query = _build_jql(project_key, jql)
    async with client:
        success, data = await client.get(
            "search/jql",
            params={"jql": query, "maxResults": max_results, "fields": SEARCH_FIELDS},
        )

    if not success:
        logger.warning(f"Issue search failed for {query!r}: {data}")
        return tool_error("Error searching issues", error=data, code=ErrorCodes.JIRA_API_ERROR, context={"jql": query})

    issues = [_summarize_issue(issue) for issue in (data or {}).get("issues", [])]
    return tool_json(issues)


async def _transition_issue(client: JiraClient, issue_key: str, status: str) -> tuple[bool, str]:
    """Move an issue to ``status`` via the matching workflow transition.

    A transition matches when its own name or its target status name equals
    ``status``, ignoring case.
    """
    success, data = await client.get(f"issue/{issue_key}/transitions")
    if not success:
        return False, data

    wanted = status.strip().lower()
    transitions = (data or {}).get("transitions", [])
    for transition in transitions:
        target = (transition.get("to") or {}).get("name", "")
        if wanted in (transition.get("name", "").lower(), target.lower()):
            success, data = await client.post(
                f"issue/{issue_key}/transitions",
                json={"transition": {"id": transition["id"]}},
            )
            if not success:
                return False, data
            return True, target or transition.get("name", status)

    available = ", ".join(t.get("name", "") for t in transitions) or "none"
    return False, f"No transition to '{status}' available. Available transitions: {available}"


async def _update_issue_impl(
    issue_key: str,
    summary: str = "",
    description: str = "",
    assignee: str = "",
    status: str = "",
    priority: str = "",
) -> str:
    """Implementation of update_issue tool.

    Field changes go through PUT /rest/api/3/issue/{key}; a status change
    goes through the issue's transitions.
    """
    if not any((summary, description, assignee, status, priority)):
        return tool_error(
            "No fields to update",
            code=ErrorCodes.INVALID_INPUT,
            hint="Provide at least one of: summary, description, assignee, status, priority.",
        )

    client = get_jira_client()
    if client is None:
        return not_configured_error()

    fields: dict = {}
    if summary:
        fields["summary"] = summary
    if description:
        fields["description"] = text_to_adf(description)
    if priority:
        fields["priority"] = {"name": priority}

    updated: list[str] = []
    async with client:
        if assignee:
            resolved, account_id = await resolve_account_id(client, assignee)
            if not resolved:
                return tool_error(f"Error updating {issue_key}", error=account_id, code=ErrorCodes.NOT_FOUND)
            fields["assignee"] = {"accountId": account_id}

        if fields:
            success, data = await client.put(f"issue/{issue_key}", json={"fields": fields})
            if not success:
                logger.warning(f"Failed to update {issue_key}: {data}")
                return tool_error(f"Error updating {issue_key}", error=data, code=ErrorCodes.JIRA_API_ERROR)
            updated.extend(fields)

        if status:
            success, result = await _transition_issue(client, issue_key, status)
            if not success:
                return tool_error(
                    f"Error transitioning {issue_key}",
                    error=result,
                    code=ErrorCodes.INVALID_INPUT,
                    context={"updated": ", ".join(updated) or "none"},
                )
            updated.append("status")

    return tool_success(f"{issue_key} updated successfully", data={"updated_fields": ", ".join(updated)})


async def _create_issue_link_impl(inward_issue_key: str, outward_issue_key: str, link_type: str) -> str:
    """Implementation of create_issue_link tool."""
    client = get_jira_client()
    if client is None:
        return not_configured_error()

    payload = {
        "type": {"name": link_type},
        "inwardIssue": {"key": inward_issue_key},
        "outwardIssue": {"key": outward_issue_key},
    }
    async with client:
        success, data = await client.post("issueLink", json=payload)

    if not success:
        return tool_error("Error creating issue link", error=data, code=ErrorCodes.JIRA_API_ERROR)

    return tool_success(f"Linked {inward_issue_key} to {outward_issue_key}", data={"link_type": link_type})


async def _create_project_impl(
    key: str,
    name: str,
    project_type_key: str,
    lead_account_id: str,
    description: str = "",
    project_template_key: str = "",
) -> str:
    """Implementation of create_project tool."""
    client = get_jira_client()
    if client is None:
        return not_configured_error()

    payload = {
        "key": key,
        "name": name,
        "projectTypeKey": project_type_key,
        "leadAccountId": lead_account_id,
    }
    if description:
        payload["description"] = description
    if project_template_key:
        payload["projectTemplateKey"] = project_template_key

    async with client:
        success, data = await client.post("project", json=payload)

    if not success:
        return tool_error("Error creating project", error=data, code=ErrorCodes.JIRA_API_ERROR, context={"key": key})

    logger.info(f"Created project {data['key']}")
    return tool_json(
        {
            "message": "Project created successfully",
            "project": {
                "id": data["id"],
                "key": data["key"],
                "url": f"{client.site_url}/browse/{data['key']}",
            },
        }
    )


def register_tools(server: FastMCP) -> int:
    """Register extra Jira tools with the MCP server."""
    registry = ToolRegistry(server)

    @registry.tool()
    async def get_issues(project_key: str, jql: str = "", max_results: int = 50) -> str:
        """
        List issues in a Jira project.

        Args:
            project_key: Project key (e.g., "CPG")
            jql: Optional extra JQL condition (e.g., "status = 'In Progress'")
            max_results: Maximum results to return (default: 50)

        Returns:
            JSON list of issues with key, summary, status, assignee and type.
        """
        return await _get_issues_impl(project_key, jql, max_results)

    @registry.tool()
    async def update_issue(
        issue_key: str,
        summary: str = "",
        description: str = "",
        assignee: str = "",
        status: str = "",
        priority: str = "",
    ) -> str:
        """
        Update a Jira issue.

        Args:
            issue_key: Issue key (e.g., "CPG-12")
            summary: New summary
            description: New plain-text description (converted like create_issue)
            assignee: Email or account ID of the new assignee
            status: Target status or transition name (e.g., "In Progress")
            priority: New priority name

        Returns:
            Confirmation listing the updated fields.
        """
        return await _update_issue_impl(issue_key, summary, description, assignee, status, priority)

    @registry.tool()
    async def create_issue_link(inward_issue_key: str, outward_issue_key: str, link_type: str) -> str:
        """
        Link two Jira issues.

        Args:
            inward_issue_key: Issue on the inward side (e.g., the blocked issue)
            outward_issue_key: Issue on the outward side (e.g., the blocker)
            link_type: Link type name (e.g., "Blocks", "Relates")

        Returns:
            Confirmation of the link.
        """
        return await _create_issue_link_impl(inward_issue_key, outward_issue_key, link_type)

    @registry.tool()
    async def create_project(
        key: str,
        name: str,
        project_type_key: str,
        lead_account_id: str,
        description: str = "",
        project_template_key: str = "",
    ) -> str:
        """
        Create a new Jira project.

        Args:
            key: Project key (e.g., "CPG")
            name: Project name
            project_type_key: "software", "business" or "service_desk"
            lead_account_id: Account ID of the project lead (see get_user)
            description: Optional project description
            project_template_key: Optional project template key

        Returns:
            JSON with the new project's id, key and URL.
        """
        return await _create_project_impl(key, name, project_type_key, lead_account_id, description, project_template_key)

    logger.info(f"Registered {registry.count} extra Jira tools")
    return registry.count
