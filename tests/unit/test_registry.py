"""Adapter registry tests."""

import pytest

from glue.adapters import AdapterRegistry, build_default_registry
from glue.adapters.base import Adapter, require_options
from glue.exceptions import AdapterActionError, AdapterNotFoundError, GlueError


def test_register_get_and_list(registry, recording_adapter):
    assert registry.get("recorder") is recording_adapter
    assert registry.get("missing") is None
    assert registry.list() == [recording_adapter]
    assert isinstance(recording_adapter, Adapter)


def test_default_registry_has_builtin_adapters(store):
    registry = build_default_registry(store)

    names = sorted(adapter.name for adapter in registry.list())
    assert names == ["gcp", "github", "linear", "notion", "slack"]
    assert set(registry.get("slack").actions) == {"notify", "upload_file"}
    assert set(registry.get("github").actions) == {"create_issue", "update_pr", "comment"}
    assert set(registry.get("gcp").actions) == {"bq", "gcs_upload", "function_invoke"}
    assert set(registry.get("linear").actions) == {"create_issue", "update_issue", "add_comment"}
    assert set(registry.get("notion").actions) == {
        "create_page",
        "append_to_page",
        "update_database",
    }


@pytest.mark.asyncio
async def test_lifecycle_hooks(registry):
    with pytest.raises(AdapterNotFoundError, match='Adapter "nope" not found'):
        await registry.authenticate("nope")
    with pytest.raises(GlueError, match="does not support authentication"):
        await registry.authenticate("recorder")
    await registry.initialize("recorder")


@pytest.mark.asyncio
async def test_initialize_hook_is_awaited():
    class Lazy:
        name = "lazy"
        actions = {}

        def __init__(self):
            self.ready = False

        async def initialize(self):
            self.ready = True

    lazy = Lazy()
    await AdapterRegistry([lazy]).initialize("lazy")
    assert lazy.ready is True


def test_require_options_messages():
    require_options({"channel": "#a", "message": "hi"}, "Slack notify", "channel", "message")

    with pytest.raises(AdapterActionError, match='Slack notify requires "channel" and "message" options'):
        require_options({"channel": "#a"}, "Slack notify", "channel", "message")
    with pytest.raises(
        AdapterActionError,
        match='GitHub comment requires "repo", "issue_number", and "body" options',
    ):
        require_options({}, "GitHub comment", "repo", "issue_number", "body")
