"""Notion integration: pages and databases through the REST API."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

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

NOTION_API_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"
# Notion rejects rich text objects longer than this
MAX_TEXT_LENGTH = 2000


def _preview(text: str) -> str:
    return text if len(text) <= 50 else f"{text[:50]}..."


def paragraph_blocks(content: str) -> list[dict[str, Any]]:
    """Turn plain text into paragraph blocks, one per non-empty line."""
    blocks = []
    for line in content.splitlines():
        if not line.strip():
            continue
        for start in range(0, len(line), MAX_TEXT_LENGTH):
            chunk = line[start : start + MAX_TEXT_LENGTH]
            blocks.append(
                {
                    "object": "block",
                    "type": "paragraph",
                    "paragraph": {
                        "rich_text": [{"type": "text", "text": {"content": chunk}}]
                    },
                }
            )
    return blocks


class NotionAdapter:
    """Calls the Notion API with an internal integration token."""

    name = "notion"

    def __init__(
        self,
        credentials: CredentialStore,
        client_factory: Callable[..., httpx.AsyncClient] = httpx.AsyncClient,
    ) -> None:
        self._credentials = credentials
        self._client_factory = client_factory
        self.actions = action_table(
            AdapterAction("create_page", self.create_page),
            AdapterAction("append_to_page", self.append_to_page),
            AdapterAction("update_database", self.update_database),
        )

    async def authenticate(self) -> None:
        typer.secho("Notion Authentication", fg=typer.colors.CYAN)
        typer.echo("")
        typer.echo("To authenticate with Notion, you need an Integration Token.")
        typer.echo("")
        typer.echo("1. Go to https://www.notion.so/my-integrations")
        typer.echo("2. Create a new integration")
        typer.echo('3. Copy the "Internal Integration Token"')
        typer.echo("4. Share the pages/databases with your integration")
        typer.echo("")

        token = prompt("Enter your Notion Integration Token", hidden=True)
        if not token:
            raise AdapterActionError("Token cannot be empty")
        await self._credentials.save("notion", "token", token)

    async def _request(
        self, method: str, path: str, failure: str, payload: dict[str, Any]
    ) -> dict:
        token = await self._credentials.get("notion", "token")
        if not token:
            raise NotAuthenticatedError("Notion", "notion")

        headers = {
            "Authorization": f"Bearer {token}",
            "Notion-Version": NOTION_VERSION,
        }
        async with self._client_factory(
            base_url=NOTION_API_URL, headers=headers, timeout=30
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

    async def create_page(self, options: AdapterOptions) -> None:
        require_options(options, "Notion create_page", "parent_id", "title")
        parent_id, title = options["parent_id"], options["title"]
        content: Optional[str] = options.get("content")

        payload: dict[str, Any] = {
            "parent": {"page_id": parent_id},
            "properties": {
                "title": {"title": [{"type": "text", "text": {"content": title}}]}
            },
        }
        if content:
            payload["children"] = paragraph_blocks(content)

        info(f"[Notion] Creating page: {title}")
        info(f"[Notion] Parent: {parent_id}")
        page = await self._request("POST", "/pages", "Failed to create Notion page", payload)
        if page.get("url"):
            info(f"[Notion] Page created: {page['url']}")

    async def append_to_page(self, options: AdapterOptions) -> None:
        page_id = options.get("page_id")
        content = options.get("content")
        content_file = options.get("content_file")
        if not page_id or (not content and not content_file):
            raise AdapterActionError(
                'Notion append_to_page requires "page_id" and either "content" or "content_file"'
            )

        if content:
            info(f"[Notion] Appending to page: {page_id}")
            info(f"[Notion] Content: {_preview(content)}")
        else:
            path = Path(content_file).expanduser()
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise AdapterActionError(f"Cannot read {path}: {exc}") from exc
            info(f"[Notion] Appending to page: {page_id}")
            info(f"[Notion] Content from file: {path}")

        blocks = paragraph_blocks(content)
        if not blocks:
            raise AdapterActionError("Notion append_to_page has no content to append")
        await self._request(
            "PATCH",
            f"/blocks/{page_id}/children",
            "Failed to append to Notion page",
            {"children": blocks},
        )

    async def update_database(self, options: AdapterOptions) -> None:
        require_options(options, "Notion update_database", "database_id", "properties")
        database_id, properties = options["database_id"], options["properties"]
        if not isinstance(properties, dict):
            raise AdapterActionError('Notion update_database "properties" must be a mapping')

        info(f"[Notion] Updating database: {database_id}")
        info(f"[Notion] Properties: {_preview(json.dumps(properties))}")
        await self._request(
            "PATCH",
            f"/databases/{database_id}",
            "Failed to update Notion database",
            {"properties": properties},
        )
