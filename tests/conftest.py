"""Shared fixtures for glue tests."""

from __future__ import annotations

import logging

import pytest

import glue.credentials as credentials
from glue.adapters import AdapterAction, AdapterRegistry, action_table
from glue.credentials import CredentialStore, FileCredentialBackend, InMemorySecretBackend
from glue.exceptions import AdapterActionError
from glue.history import HistoryRecorder


class FailingSecretBackend:
    """Secure backend standing in for a locked or missing keychain."""

    def __init__(self) -> None:
        self.attempts = 0

    def _fail(self, *args, **kwargs):
        self.attempts += 1
        raise RuntimeError("keychain locked")

    set = _fail
    get = _fail
    delete = _fail
    find_all = _fail


class RecordingAdapter:
    """Adapter whose ``record`` action remembers the options it was given."""

    name = "recorder"

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.fail_on: set[str] = set()
        self.actions = action_table(AdapterAction("record", self.record))

    async def record(self, options: dict) -> None:
        self.calls.append(options)
        label = options.get("label")
        if label in self.fail_on:
            raise AdapterActionError(f"recorder failed at {label}")


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path, monkeypatch):
    """Keep every test away from the real home directory and keychain."""
    monkeypatch.setenv("GLUE_CONFIG", str(tmp_path / "missing-config.yaml"))
    monkeypatch.setenv("GLUE_HISTORY_DIR", str(tmp_path / "history"))
    monkeypatch.setenv("GLUE_CREDENTIALS_DIR", str(tmp_path / "auth"))
    monkeypatch.setenv("GLUE_CREDENTIALS_BACKEND", "file")
    monkeypatch.setattr(credentials, "_store_instance", None)
    yield
    # the CLI callback attaches handlers to the "glue" logger
    logger = logging.getLogger("glue")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def file_backend(tmp_path) -> FileCredentialBackend:
    return FileCredentialBackend(tmp_path / "auth")


@pytest.fixture
def secure_backend() -> InMemorySecretBackend:
    return InMemorySecretBackend()


@pytest.fixture
def store(file_backend, secure_backend) -> CredentialStore:
    return CredentialStore(file_backend, secure_backend, service_name="glue-test")


@pytest.fixture
def failing_backend() -> FailingSecretBackend:
    return FailingSecretBackend()


@pytest.fixture
def failing_store(file_backend, failing_backend) -> CredentialStore:
    return CredentialStore(file_backend, failing_backend, service_name="glue-test")


@pytest.fixture
def recording_adapter() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture
def registry(recording_adapter) -> AdapterRegistry:
    return AdapterRegistry([recording_adapter])


@pytest.fixture
def recorder(tmp_path) -> HistoryRecorder:
    return HistoryRecorder(tmp_path / "history")
