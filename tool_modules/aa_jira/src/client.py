"""Jira Cloud REST API v3 client.

Wraps APIClient with Jira's Basic auth scheme (account email + API token)
and Jira-specific error bodies, plus the lookups several tools share.

Authentication (environment variables win over config.json ``jira`` section):
- JIRA_HOST: Jira instance hostname (e.g., paddock.atlassian.net)
- JIRA_EMAIL: Account email address
- JIRA_API_TOKEN: API token from https://id.atlassian.com/manage-profile/security/api-tokens
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from jira_mcp.config_manager import get_jira_settings
from jira_mcp.errors import ErrorCodes, tool_error
from jira_mcp.http_client import ERROR_BODY_LIMIT, APIClient

logger = logging.getLogger(__name__)

API_PATH = "/rest/api/3"


def normalize_host(host: str) -> str:
    """Return ``https://host`` for a bare hostname, or the URL unchanged."""
    host = host.strip().rstrip("/")
    if host.startswith(("http://", "https://")):
        return host
    return f"https://{host}"


@dataclass
class JiraClient(APIClient):
    """APIClient preconfigured for a Jira Cloud site."""

    site_url: str = ""
    auth_error_msg: str = "Jira authentication failed (401 Unauthorized). Check JIRA_EMAIL and JIRA_API_TOKEN."
    not_found_msg: str = "Jira resource not found (404)."

    def _format_http_error(self, response: httpx.Response) -> str:
        """Include Jira's ``errorMessages``/``errors`` details when present."""
        prefix = f"Jira API error: HTTP {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            details = [f"  - {msg}" for msg in body.get("errorMessages", [])]
            details.extend(f"  - {name}: {msg}" for name, msg in body.get("errors", {}).items())
            if details:
                return prefix + "\n" + "\n".join(details)

        text = response.text[:ERROR_BODY_LIMIT]
        return f"{prefix}: {text}" if text else prefix

    def browse_url(self, issue_key: str) -> str:
        return f"{self.site_url}/browse/{issue_key}"


def get_jira_client() -> JiraClient | None:
    """Build a JiraClient from settings, or None if credentials are missing."""
    settings = get_jira_settings()
    if not (settings["host"] and settings["email"] and settings["api_token"]):
        return None

    site_url = normalize_host(settings["host"])
    return JiraClient(
        base_url=site_url + API_PATH,
        basic_auth=(settings["email"], settings["api_token"]),
        timeout=settings["timeout"],
        site_url=site_url,
    )


def not_configured_error() -> str:
    return tool_error(
        "Jira authentication not configured",
        code=ErrorCodes.AUTH_FAILED,
        hint="Set JIRA_HOST, JIRA_EMAIL and JIRA_API_TOKEN (or the jira section of config.json).",
    )


async def find_user(client: APIClient, query: str) -> tuple[bool, dict[str, Any] | None | str]:
    """Look up the first user matching an email or name.

    Returns:
        ``(True, user)`` when found, ``(True, None)`` when no user matches,
        ``(False, message)`` when the request failed.
    """
    success, data = await client.get("user/search", params={"query": query, "maxResults": 1})
    if not success:
        return False, data
    if not data:
        return True, None
    return True, data[0]


async def resolve_account_id(client: APIClient, assignee: str) -> tuple[bool, str]:
    """Turn an assignee into a Jira account id.

    Values containing ``@`` are treated as emails and looked up; anything
    else is assumed to already be an account id.

    Returns:
        ``(True, account_id)`` or ``(False, error_message)``
    """
    if "@" not in assignee:
        return True, assignee

    success, user = await find_user(client, assignee)
    if not success:
        return False, str(user)
    if user is None:
        return False, f"No user found with email: {assignee}"
    return True, user["accountId"]
