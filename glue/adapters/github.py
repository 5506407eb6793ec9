"""GitHub integration: issues, pull requests and comments."""

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

GITHUB_API_URL = "https://api.github.com"


def _split_repo(repo: str) -> tuple[str, str]:
    owner, _, name = str(repo).partition("/")
    if not owner or not name or "/" in name:
        raise AdapterActionError('Repository must be in format "owner/repo"')
    return owner, name


class GitHubAdapter:
    """Calls the GitHub REST API with a personal access token."""

    name = "github"

    def __init__(
        self,
        credentials: CredentialStore,
        client_factory: Callable[..., httpx.AsyncClient] = httpx.AsyncClient,
    ) -> None:
        self._credentials = credentials
        self._client_factory = client_factory
        self.actions = action_table(
            AdapterAction("create_issue", self.create_issue),
            AdapterAction("update_pr", self.update_pr),
            AdapterAction("comment", self.comment),
        )

    async def authenticate(self) -> None:
        typer.secho("GitHub Authentication", fg=typer.colors.CYAN)
        typer.echo("")
        typer.echo("To authenticate with GitHub, you need a Personal Access Token.")
        typer.echo("")
        typer.echo("1. Go to https://github.com/settings/tokens")
        typer.echo('2. Click "Generate new token (classic)"')
        typer.echo("3. Select the necessary scopes (repo, workflow, etc.)")
        typer.echo("4. Copy the generated token")
        typer.echo("")

        token = prompt("Enter your GitHub Personal Access Token", hidden=True)
        if not token:
            raise AdapterActionError("Token cannot be empty")
        await self._credentials.save("github", "token", token)

    async def _request(
        self, method: str, path: str, failure: str, payload: dict[str, Any]
    ) -> dict:
        token = await self._credentials.get("github", "token")
        if not token:
            raise NotAuthenticatedError("GitHub", "github")

        headers = {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github+json",
        }
        async with self._client_factory(
            base_url=GITHUB_API_URL, headers=headers, timeout=30
        ) as client:
            try:
                response = await client.request(method, path, json=payload)
            except httpx.HTTPError as exc:
                raise AdapterActionError(f"{failure}: {exc}") from exc

        if response.is_error:
            try:
                detail = response.json().get("message") or response.reason_phrase
            except (ValueError, AttributeError):
                detail = response.reason_phrase
            raise AdapterActionError(f"{failure}: {detail}")
        return json_body(response, failure)

    async def create_issue(self, options: AdapterOptions) -> None:
        require_options(options, "GitHub create_issue", "repo", "title")
        owner, repo = _split_repo(options["repo"])

        data = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues",
            "Failed to create GitHub issue",
            {
                "title": options["title"],
                "body": options.get("body") or "",
                "labels": list(options.get("labels") or []),
            },
        )
        info(f"[GitHub] Issue created: {data.get('html_url', '')}")

    async def update_pr(self, options: AdapterOptions) -> None:
        require_options(options, "GitHub update_pr", "repo", "pr_number")
        owner, repo = _split_repo(options["repo"])
        pr_number = options["pr_number"]

        payload: dict[str, Any] = {}
        if options.get("state"):
            state = options["state"]
            if state not in ("open", "closed"):
                raise AdapterActionError('GitHub update_pr "state" must be "open" or "closed"')
            payload["state"] = state
        if options.get("body"):
            payload["body"] = options["body"]

        await self._request(
            "PATCH",
            f"/repos/{owner}/{repo}/pulls/{pr_number}",
            "Failed to update GitHub PR",
            payload,
        )
        info(f"[GitHub] PR #{pr_number} updated")

    async def comment(self, options: AdapterOptions) -> None:
        require_options(options, "GitHub comment", "repo", "issue_number", "body")
        owner, repo = _split_repo(options["repo"])
        issue_number = options["issue_number"]

        await self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
            "Failed to add GitHub comment",
            {"body": options["body"]},
        )
        info(f"[GitHub] Comment added to #{issue_number}")
