"""Slack integration: post messages and upload files."""

from __future__ import annotations

from pathlib import Path
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

SLACK_API_URL = "https://slack.com/api"


class SlackAdapter:
    """Talks to the Slack Web API with a bot token."""

    name = "slack"

    def __init__(
        self,
        credentials: CredentialStore,
        client_factory: Callable[..., httpx.AsyncClient] = httpx.AsyncClient,
    ) -> None:
        self._credentials = credentials
        self._client_factory = client_factory
        self.actions = action_table(
            AdapterAction("notify", self.notify),
            AdapterAction("upload_file", self.upload_file),
        )

    async def authenticate(self) -> None:
        typer.secho("Slack Authentication", fg=typer.colors.CYAN)
        typer.echo("")
        typer.echo("To authenticate with Slack, you need a Bot User OAuth Token.")
        typer.echo("")
        typer.echo("1. Go to https://api.slack.com/apps")
        typer.echo("2. Create a new app or select an existing one")
        typer.echo('3. Go to "OAuth & Permissions"')
        typer.echo('4. Copy the "Bot User OAuth Token" (starts with xoxb-)')
        typer.echo("")

        token = prompt("Enter your Slack Bot Token", hidden=True)
        if not token.startswith("xoxb-"):
            raise AdapterActionError(
                'Invalid token format. Slack bot tokens should start with "xoxb-"'
            )
        await self._credentials.save("slack", "token", token)

    async def _token(self) -> str:
        token = await self._credentials.get("slack", "token")
        if not token:
            raise NotAuthenticatedError("Slack", "slack")
        return token

    async def _api(self, client: httpx.AsyncClient, method: str, **kwargs: Any) -> dict:
        try:
            response = await client.post(f"{SLACK_API_URL}/{method}", **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise AdapterActionError(f"Slack {method} failed: {exc}") from exc
        data = json_body(response, f"Slack {method} failed")
        if not data.get("ok"):
            raise AdapterActionError(
                f"Slack {method} failed: {data.get('error', 'unknown error')}"
            )
        return data

    async def notify(self, options: AdapterOptions) -> None:
        require_options(options, "Slack notify", "channel", "message")
        token = await self._token()
        channel, message = options["channel"], options["message"]

        info(f"[Slack] Sending to {channel}: {message}")
        async with self._client_factory(
            headers={"Authorization": f"Bearer {token}"}, timeout=30
        ) as client:
            await self._api(
                client, "chat.postMessage", json={"channel": channel, "text": message}
            )

    async def upload_file(self, options: AdapterOptions) -> None:
        require_options(options, "Slack upload_file", "channel", "file")
        token = await self._token()
        channel, comment = options["channel"], options.get("comment")
        path = Path(options["file"]).expanduser()
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise AdapterActionError(f"Cannot read {path}: {exc.strerror or exc}") from exc

        info(f"[Slack] Uploading {path} to {channel}")
        if comment:
            info(f"[Slack] Comment: {comment}")

        async with self._client_factory(
            headers={"Authorization": f"Bearer {token}"}, timeout=60
        ) as client:
            ticket = await self._api(
                client,
                "files.getUploadURLExternal",
                data={"filename": path.name, "length": str(len(content))},
            )
            try:
                upload = await client.post(ticket["upload_url"], content=content)
                upload.raise_for_status()
            except httpx.HTTPError as exc:
                raise AdapterActionError(f"Slack file upload failed: {exc}") from exc

            payload: dict[str, Any] = {
                "files": [{"id": ticket["file_id"], "title": path.name}],
                "channel_id": channel,
            }
            if comment:
                payload["initial_comment"] = comment
            await self._api(client, "files.completeUploadExternal", json=payload)
