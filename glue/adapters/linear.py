"""Linear integration: issues and comments through the GraphQL API."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import typer

from ..credentials import CredentialStore
from ..exceptions import AdapterActionError, NotAuthenticatedError
from .base import (
    AdapterAction,
    AdapterOptions,
    action_table,
    info,
    json_body,
    prompt,
    require_options,
)

LINEAR_API_URL = "https://api.linear.app/graphql"

CREATE_ISSUE = """
mutation CreateIssue($input: IssueCreateInput!) {
  issueCreate(input: $input) { success issue { identifier url } }
}
"""

UPDATE_ISSUE = """
mutation UpdateIssue($id: String!, $input: IssueUpdateInput!) {
  issueUpdate(id: $id, input: $input) { success issue { identifier } }
}
"""

CREATE_COMMENT = """
mutation CreateComment($input: CommentCreateInput!) {
  commentCreate(input: $input) { success }
}
"""


def _priority(value: Any) -> int:
    # Linear priorities: 0 none, 1 urgent, 2 high, 3 medium, 4 low
    try:
        priority = int(value)
    except (TypeError, ValueError):
        priority = -1
    if not 0 <= priority <= 4:
        raise AdapterActionError('Linear "priority" must be an integer from 0 to 4')
    return priority


def _preview(text: str) -> str:
    return text if len(text) <= 50 else f"{text[:50]}..."


class LinearAdapter:
    """Calls the Linear GraphQL API with a personal API key."""

    name = "linear"

    def __init__(
        self,
        credentials: CredentialStore,
        client_factory: Callable[..., httpx.AsyncClient] = httpx.AsyncClient,
    ) -> None:
        self._credentials = credentials
        self._client_factory = client_factory
        self.actions = action_table(
            AdapterAction("create_issue", self.create_issue),
            AdapterAction("update_issue", self.update_issue),
            AdapterAction("add_comment", self.add_comment),
        )

    async def authenticate(self) -> None:
        typer.secho("Linear Authentication", fg=typer.colors.CYAN)
        typer.echo("")
        typer.echo("To authenticate with Linear, you need an API key.")
        typer.echo("")
        typer.echo("1. Go to https://linear.app/settings/api")
        typer.echo("2. Create a new personal API key")
        typer.echo("3. Copy the generated key")
        typer.echo("")

        api_key = prompt("Enter your Linear API Key", hidden=True)
        if not api_key:
            raise AdapterActionError("API key cannot be empty")
        await self._credentials.save("linear", "api_key", api_key)

    async def _mutate(
        self, query: str, variables: dict[str, Any], field: str, failure: str
    ) -> dict:
        api_key = await self._credentials.get("linear", "api_key")
        if not api_key:
            raise NotAuthenticatedError("Linear", "linear")

        async with self._client_factory(
            headers={"Authorization": api_key}, timeout=30
        ) as client:
            try:
                response = await client.post(
                    LINEAR_API_URL, json={"query": query, "variables": variables}
                )
            except httpx.HTTPError as exc:
                raise AdapterActionError(f"{failure}: {exc}") from exc

        data = json_body(response, failure)
        # GraphQL reports most errors with a 200 or 400 and an "errors" list
        errors = data.get("errors")
        if errors:
            message = errors[0].get("message") if isinstance(errors[0], dict) else errors[0]
            raise AdapterActionError(f"{failure}: {message}")
        if response.is_error:
            raise AdapterActionError(f"{failure}: {response.reason_phrase}")

        result = (data.get("data") or {}).get(field) or {}
        if not result.get("success"):
            raise AdapterActionError(f"{failure}: request was not accepted")
        return result

    async def create_issue(self, options: AdapterOptions) -> None:
        require_options(options, "Linear create_issue", "team", "title")
        team, title = options["team"], options["title"]

        issue: dict[str, Any] = {"teamId": team, "title": title}
        if options.get("description"):
            issue["description"] = options["description"]
        if options.get("priority") is not None:
            issue["priority"] = _priority(options["priority"])
        if options.get("assignee"):
            issue["assigneeId"] = options["assignee"]

        info(f"[Linear] Creating issue for team {team}: {title}")
        result = await self._mutate(
            CREATE_ISSUE, {"input": issue}, "issueCreate", "Failed to create Linear issue"
        )
        created = result.get("issue") or {}
        info(f"[Linear] Issue created: {created.get('identifier', '')} {created.get('url', '')}")

    async def update_issue(self, options: AdapterOptions) -> None:
        require_options(options, "Linear update_issue", "issue_id")
        issue_id = options["issue_id"]

        changes: dict[str, Any] = {}
        if options.get("state"):
            changes["stateId"] = options["state"]
        if options.get("priority") is not None:
            changes["priority"] = _priority(options["priority"])
        if options.get("assignee"):
            changes["assigneeId"] = options["assignee"]

        info(f"[Linear] Updating issue: {issue_id}")
        await self._mutate(
            UPDATE_ISSUE,
            {"id": issue_id, "input": changes},
            "issueUpdate",
            "Failed to update Linear issue",
        )

    async def add_comment(self, options: AdapterOptions) -> None:
        require_options(options, "Linear add_comment", "issue_id", "comment")
        issue_id, comment = options["issue_id"], options["comment"]

        info(f"[Linear] Adding comment to issue: {issue_id}")
        info(f"[Linear] Comment: {_preview(comment)}")
        await self._mutate(
            CREATE_COMMENT,
            {"input": {"issueId": issue_id, "body": comment}},
            "commentCreate",
            "Failed to add Linear comment",
        )
