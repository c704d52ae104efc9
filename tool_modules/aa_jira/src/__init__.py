"""
AA Jira - Jira Cloud issue tools.

This module provides:
- tools_core: list_issue_types, get_user, create_issue
- tools_extra: get_issues, update_issue, create_issue_link, create_project
- adf: plain text to Atlassian Document Format conversion
- client: Jira REST API v3 client
"""
