"""Google Cloud integration driven through the ``bq``, ``gsutil`` and ``gcloud`` tools."""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence

import typer

from ..credentials import CredentialStore
from ..exceptions import AdapterActionError, NotAuthenticatedError
from .base import AdapterOptions, AdapterAction, action_table, info, prompt, require_options

DEFAULT_REGION = "us-central1"

ToolResult = tuple[int, str, str]
ToolRunner = Callable[[Sequence[str], dict], Awaitable[ToolResult]]


async def run_tool(argv: Sequence[str], env: dict) -> ToolResult:
    """Run ``argv`` without a shell and capture its output."""
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
        )
    except OSError as exc:
        raise AdapterActionError(f"Failed to start {argv[0]}: {exc.strerror or exc}") from exc
    stdout, stderr = await proc.communicate()
    return proc.returncode, stdout.decode(errors="replace"), stderr.decode(errors="replace")


class GCPAdapter:
    """BigQuery, Cloud Storage and Cloud Functions via a service account key."""

    name = "gcp"

    def __init__(
        self, credentials: CredentialStore, runner: Optional[ToolRunner] = None
    ) -> None:
        self._credentials = credentials
        self._run = runner or run_tool
        self.actions = action_table(
            AdapterAction("bq", self.bq),
            AdapterAction("gcs_upload", self.gcs_upload),
            AdapterAction("function_invoke", self.function_invoke),
        )

    async def authenticate(self) -> None:
        typer.secho("GCP Authentication", fg=typer.colors.CYAN)
        typer.echo("")
        typer.echo("To authenticate with GCP, you need a Service Account key file.")
        typer.echo("")
        typer.echo("1. Go to https://console.cloud.google.com/iam-admin/serviceaccounts")
        typer.echo("2. Create a service account or select an existing one")
        typer.echo("3. Create a new key (JSON format)")
        typer.echo("4. Download the key file")
        typer.echo("")

        key_path = prompt("Enter the path to your GCP service account key file")
        if not key_path:
            raise AdapterActionError("Key file path cannot be empty")
        await self._credentials.save("gcp", "keyfile", key_path)

        project_id = prompt("Enter your GCP project ID")
        if not project_id:
            raise AdapterActionError("Project ID cannot be empty")
        await self._credentials.save("gcp", "project_id", project_id)

    async def _account(self) -> tuple[str, str]:
        keyfile = await self._credentials.get("gcp", "keyfile")
        project_id = await self._credentials.get("gcp", "project_id")
        if not keyfile or not project_id:
            raise NotAuthenticatedError("GCP", "gcp")
        return keyfile, project_id

    async def _invoke(self, argv: list[str], keyfile: str, failure: str) -> str:
        env = dict(os.environ)
        env["GOOGLE_APPLICATION_CREDENTIALS"] = os.path.expanduser(keyfile)
        code, stdout, stderr = await self._run(argv, env)
        if code != 0:
            detail = stderr.strip() or f"{argv[0]} exited with code {code}"
            raise AdapterActionError(f"{failure}: {detail}")
        if stderr.strip():
            typer.secho(f"[GCP] Warning: {stderr.strip()}", fg=typer.colors.YELLOW)
        return stdout

    async def bq(self, options: AdapterOptions) -> None:
        if not options.get("query") and not options.get("query_file"):
            raise AdapterActionError('GCP bq requires either "query" or "query_file" option')
        keyfile, project_id = await self._account()

        query = options.get("query")
        if options.get("query_file"):
            try:
                query = Path(options["query_file"]).expanduser().read_text(encoding="utf-8")
            except OSError as exc:
                raise AdapterActionError(
                    f"Failed to execute BigQuery: cannot read {options['query_file']}"
                ) from exc

        argv = ["bq", "query", f"--project_id={project_id}", "--format=json"]
        if options.get("dataset"):
            argv.append(f"--dataset_id={options['dataset']}")
        argv.append(query)

        info("[GCP BigQuery] Running query...")
        stdout = await self._invoke(argv, keyfile, "Failed to execute BigQuery")
        try:
            rows = json.loads(stdout) if stdout.strip() else []
        except json.JSONDecodeError as exc:
            raise AdapterActionError(f"Failed to execute BigQuery: unexpected output: {exc}") from exc
        info(f"[GCP BigQuery] Query completed: {len(rows)} rows returned")

    async def gcs_upload(self, options: AdapterOptions) -> None:
        require_options(options, "GCP gcs_upload", "source", "bucket")
        keyfile, _project_id = await self._account()

        source = str(options["source"])
        destination = options.get("destination") or Path(source).name
        target = f"gs://{options['bucket']}/{destination}"

        info(f"[GCP Storage] Uploading {source}...")
        await self._invoke(
            ["gsutil", "-q", "cp", source, target], keyfile, "Failed to upload to GCS"
        )
        info(f"[GCP Storage] Uploaded to {target}")

    async def function_invoke(self, options: AdapterOptions) -> None:
        require_options(options, "GCP function_invoke", "name")
        keyfile, project_id = await self._account()

        name = options["name"]
        argv = [
            "gcloud",
            "functions",
            "call",
            str(name),
            f"--project={project_id}",
            f"--region={options.get('region') or DEFAULT_REGION}",
        ]
        if options.get("data") is not None:
            argv.append(f"--data={json.dumps(options['data'])}")

        info(f"[GCP Functions] Invoking {name}...")
        stdout = await self._invoke(argv, keyfile, "Failed to invoke Cloud Function")
        info("[GCP Functions] Function executed successfully")
        if stdout.strip():
            info(f"[GCP Functions] Response: {stdout.strip()[:100]}")
