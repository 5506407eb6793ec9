"""Built-in adapter tests against mocked HTTP and tool invocations."""

import json

import httpx
import pytest

from glue.adapters import GCPAdapter, GitHubAdapter, LinearAdapter, NotionAdapter, SlackAdapter
from glue.exceptions import AdapterActionError, NotAuthenticatedError


def _client_factory(handler, requests):
    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    def factory(**kwargs):
        return httpx.AsyncClient(transport=httpx.MockTransport(recording_handler), **kwargs)

    return factory


@pytest.mark.asyncio
async def test_slack_notify_posts_message(store):
    await store.save("slack", "token", "xoxb-abc")
    requests = []
    adapter = SlackAdapter(
        store, _client_factory(lambda r: httpx.Response(200, json={"ok": True}), requests)
    )

    await adapter.actions["notify"].execute({"channel": "#deploys", "message": "shipped"})

    assert len(requests) == 1
    assert requests[0].url.path == "/api/chat.postMessage"
    assert requests[0].headers["Authorization"] == "Bearer xoxb-abc"
    assert json.loads(requests[0].content) == {"channel": "#deploys", "text": "shipped"}


@pytest.mark.asyncio
async def test_slack_reports_api_errors(store):
    await store.save("slack", "token", "xoxb-abc")
    adapter = SlackAdapter(
        store,
        _client_factory(
            lambda r: httpx.Response(200, json={"ok": False, "error": "channel_not_found"}), []
        ),
    )

    with pytest.raises(AdapterActionError, match="channel_not_found"):
        await adapter.notify({"channel": "#nope", "message": "hi"})


@pytest.mark.asyncio
async def test_slack_requires_options_and_token(store):
    adapter = SlackAdapter(store)

    with pytest.raises(AdapterActionError, match='requires "channel" and "message" options'):
        await adapter.notify({"channel": "#a"})
    with pytest.raises(NotAuthenticatedError, match="Slack not authenticated. Run: glue auth slack"):
        await adapter.notify({"channel": "#a", "message": "hi"})


@pytest.mark.asyncio
async def test_slack_upload_file_flow(store, tmp_path):
    await store.save("slack", "token", "xoxb-abc")
    report = tmp_path / "report.txt"
    report.write_text("all green")

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("files.getUploadURLExternal"):
            return httpx.Response(
                200,
                json={"ok": True, "upload_url": "https://files.slack.com/upload/1", "file_id": "F1"},
            )
        if request.url.host == "files.slack.com":
            return httpx.Response(200, text="OK")
        return httpx.Response(200, json={"ok": True})

    requests = []
    adapter = SlackAdapter(store, _client_factory(handler, requests))

    await adapter.upload_file({"channel": "C123", "file": str(report), "comment": "nightly"})

    assert [r.url.path for r in requests] == [
        "/api/files.getUploadURLExternal",
        "/upload/1",
        "/api/files.completeUploadExternal",
    ]
    assert requests[1].content == b"all green"
    complete = json.loads(requests[2].content)
    assert complete["channel_id"] == "C123"
    assert complete["initial_comment"] == "nightly"
    assert complete["files"] == [{"id": "F1", "title": "report.txt"}]


@pytest.mark.asyncio
async def test_github_create_issue(store):
    await store.save("github", "token", "ghp_123")
    requests = []
    adapter = GitHubAdapter(
        store,
        _client_factory(
            lambda r: httpx.Response(201, json={"html_url": "https://github.com/o/r/issues/1"}),
            requests,
        ),
    )

    await adapter.create_issue({"repo": "o/r", "title": "CI failed", "labels": ["ci"]})

    request = requests[0]
    assert request.method == "POST"
    assert request.url.path == "/repos/o/r/issues"
    assert request.headers["Authorization"] == "token ghp_123"
    assert json.loads(request.content) == {"title": "CI failed", "body": "", "labels": ["ci"]}


@pytest.mark.asyncio
async def test_github_error_message_from_api(store):
    await store.save("github", "token", "ghp_123")
    adapter = GitHubAdapter(
        store, _client_factory(lambda r: httpx.Response(404, json={"message": "Not Found"}), [])
    )

    with pytest.raises(AdapterActionError, match="Failed to add GitHub comment: Not Found"):
        await adapter.comment({"repo": "o/r", "issue_number": 7, "body": "hi"})


@pytest.mark.asyncio
async def test_github_update_pr_and_repo_validation(store):
    await store.save("github", "token", "ghp_123")
    requests = []
    adapter = GitHubAdapter(
        store, _client_factory(lambda r: httpx.Response(200, json={}), requests)
    )

    await adapter.update_pr({"repo": "o/r", "pr_number": 5, "state": "closed"})

    assert requests[0].method == "PATCH"
    assert requests[0].url.path == "/repos/o/r/pulls/5"
    assert json.loads(requests[0].content) == {"state": "closed"}

    with pytest.raises(AdapterActionError, match='format "owner/repo"'):
        await adapter.update_pr({"repo": "just-a-name", "pr_number": 5})


@pytest.mark.asyncio
async def test_github_not_authenticated(store):
    adapter = GitHubAdapter(store)

    with pytest.raises(NotAuthenticatedError):
        await adapter.create_issue({"repo": "o/r", "title": "x"})


class FakeTools:
    def __init__(self, result=(0, "", "")):
        self.result = result
        self.calls = []

    async def __call__(self, argv, env):
        self.calls.append((list(argv), env))
        return self.result


@pytest.mark.asyncio
async def test_gcp_upload_builds_gsutil_command(store):
    await store.save("gcp", "keyfile", "/keys/sa.json")
    await store.save("gcp", "project_id", "demo")
    tools = FakeTools()
    adapter = GCPAdapter(store, runner=tools)

    await adapter.gcs_upload({"source": "dist/app.tar.gz", "bucket": "releases"})

    argv, env = tools.calls[0]
    assert argv == ["gsutil", "-q", "cp", "dist/app.tar.gz", "gs://releases/app.tar.gz"]
    assert env["GOOGLE_APPLICATION_CREDENTIALS"] == "/keys/sa.json"


@pytest.mark.asyncio
async def test_gcp_bq_parses_rows_and_reports_failures(store):
    await store.save("gcp", "keyfile", "/keys/sa.json")
    await store.save("gcp", "project_id", "demo")
    tools = FakeTools((0, '[{"n": 1}, {"n": 2}]', ""))
    adapter = GCPAdapter(store, runner=tools)

    await adapter.bq({"query": "SELECT 1", "dataset": "analytics"})

    argv, _ = tools.calls[0]
    assert argv[:2] == ["bq", "query"]
    assert "--project_id=demo" in argv
    assert "--dataset_id=analytics" in argv
    assert argv[-1] == "SELECT 1"

    tools.result = (2, "", "Access Denied")
    with pytest.raises(AdapterActionError, match="Failed to execute BigQuery: Access Denied"):
        await adapter.bq({"query": "SELECT 1"})


@pytest.mark.asyncio
async def test_gcp_requires_both_credentials(store):
    await store.save("gcp", "keyfile", "/keys/sa.json")
    adapter = GCPAdapter(store, runner=FakeTools())

    with pytest.raises(NotAuthenticatedError, match="GCP not authenticated"):
        await adapter.function_invoke({"name": "hello"})
    with pytest.raises(AdapterActionError, match='either "query" or "query_file"'):
        await adapter.bq({})


@pytest.mark.asyncio
async def test_non_json_success_bodies_become_action_errors(store):
    await store.save("slack", "token", "xoxb-abc")
    await store.save("github", "token", "ghp_123")
    def html(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    slack = SlackAdapter(store, _client_factory(html, []))
    with pytest.raises(AdapterActionError, match="Slack chat.postMessage failed: invalid JSON"):
        await slack.notify({"channel": "#a", "message": "hi"})

    github = GitHubAdapter(store, _client_factory(html, []))
    with pytest.raises(AdapterActionError, match="Failed to create GitHub issue: invalid JSON"):
        await github.create_issue({"repo": "o/r", "title": "x"})


@pytest.mark.asyncio
async def test_linear_create_issue_sends_graphql_mutation(store):
    await store.save("linear", "api_key", "lin_api_1")
    requests = []
    adapter = LinearAdapter(
        store,
        _client_factory(
            lambda r: httpx.Response(
                200,
                json={
                    "data": {
                        "issueCreate": {
                            "success": True,
                            "issue": {"identifier": "ENG-1", "url": "https://linear.app/i/ENG-1"},
                        }
                    }
                },
            ),
            requests,
        ),
    )

    await adapter.actions["create_issue"].execute(
        {"team": "team-uuid", "title": "Nightly failed", "priority": "2", "assignee": "user-1"}
    )

    request = requests[0]
    assert str(request.url) == "https://api.linear.app/graphql"
    assert request.headers["Authorization"] == "lin_api_1"
    body = json.loads(request.content)
    assert "issueCreate" in body["query"]
    assert body["variables"]["input"] == {
        "teamId": "team-uuid",
        "title": "Nightly failed",
        "priority": 2,
        "assigneeId": "user-1",
    }


@pytest.mark.asyncio
async def test_linear_reports_graphql_errors(store):
    await store.save("linear", "api_key", "lin_api_1")
    adapter = LinearAdapter(
        store,
        _client_factory(
            lambda r: httpx.Response(200, json={"errors": [{"message": "Entity not found"}]}), []
        ),
    )

    with pytest.raises(AdapterActionError, match="Failed to add Linear comment: Entity not found"):
        await adapter.add_comment({"issue_id": "ENG-9", "comment": "looking"})


@pytest.mark.asyncio
async def test_linear_update_issue_and_validation(store):
    requests = []
    adapter = LinearAdapter(
        store,
        _client_factory(
            lambda r: httpx.Response(200, json={"data": {"issueUpdate": {"success": True}}}),
            requests,
        ),
    )

    with pytest.raises(AdapterActionError, match='requires "issue_id" option'):
        await adapter.update_issue({})
    with pytest.raises(NotAuthenticatedError, match="Linear not authenticated. Run: glue auth linear"):
        await adapter.update_issue({"issue_id": "ENG-1"})

    await store.save("linear", "api_key", "lin_api_1")
    await adapter.update_issue({"issue_id": "ENG-1", "state": "done-state-id"})

    body = json.loads(requests[0].content)
    assert body["variables"] == {"id": "ENG-1", "input": {"stateId": "done-state-id"}}

    with pytest.raises(AdapterActionError, match="integer from 0 to 4"):
        await adapter.update_issue({"issue_id": "ENG-1", "priority": "urgent"})


@pytest.mark.asyncio
async def test_notion_create_page(store):
    await store.save("notion", "token", "secret_abc")
    requests = []
    adapter = NotionAdapter(
        store,
        _client_factory(lambda r: httpx.Response(200, json={"url": "https://notion.so/p"}), requests),
    )

    await adapter.actions["create_page"].execute(
        {"parent_id": "parent-1", "title": "Release notes", "content": "line one\n\nline two"}
    )

    request = requests[0]
    assert request.method == "POST"
    assert request.url.path == "/v1/pages"
    assert request.headers["Authorization"] == "Bearer secret_abc"
    assert request.headers["Notion-Version"] == "2022-06-28"
    body = json.loads(request.content)
    assert body["parent"] == {"page_id": "parent-1"}
    assert body["properties"]["title"]["title"][0]["text"]["content"] == "Release notes"
    assert [b["paragraph"]["rich_text"][0]["text"]["content"] for b in body["children"]] == [
        "line one",
        "line two",
    ]


@pytest.mark.asyncio
async def test_notion_append_from_content_file(store, tmp_path):
    await store.save("notion", "token", "secret_abc")
    notes = tmp_path / "CHANGELOG.md"
    notes.write_text("Fixed the build\n")
    requests = []
    adapter = NotionAdapter(
        store, _client_factory(lambda r: httpx.Response(200, json={}), requests)
    )

    await adapter.append_to_page({"page_id": "page-1", "content_file": str(notes)})

    assert requests[0].method == "PATCH"
    assert requests[0].url.path == "/v1/blocks/page-1/children"
    children = json.loads(requests[0].content)["children"]
    assert children[0]["paragraph"]["rich_text"][0]["text"]["content"] == "Fixed the build"

    with pytest.raises(AdapterActionError, match='either "content" or "content_file"'):
        await adapter.append_to_page({"page_id": "page-1"})
    with pytest.raises(AdapterActionError, match="Cannot read"):
        await adapter.append_to_page({"page_id": "page-1", "content_file": str(tmp_path / "nope")})


@pytest.mark.asyncio
async def test_notion_update_database_errors(store):
    adapter = NotionAdapter(
        store,
        _client_factory(
            lambda r: httpx.Response(400, json={"message": "body failed validation"}), []
        ),
    )

    with pytest.raises(AdapterActionError, match='requires "database_id" and "properties" options'):
        await adapter.update_database({"database_id": "db-1"})
    with pytest.raises(NotAuthenticatedError, match="Notion not authenticated. Run: glue auth notion"):
        await adapter.update_database({"database_id": "db-1", "properties": {"Status": {}}})

    await store.save("notion", "token", "secret_abc")
    with pytest.raises(
        AdapterActionError, match="Failed to update Notion database: body failed validation"
    ):
        await adapter.update_database({"database_id": "db-1", "properties": {"Status": {}}})
