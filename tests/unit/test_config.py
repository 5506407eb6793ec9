"""Tests for configuration loading."""

from pathlib import Path

from glue.config import load_config
from glue.credentials import get_credential_store


def test_defaults_when_config_missing(tmp_path, monkeypatch):
    monkeypatch.delenv("GLUE_HISTORY_DIR")
    monkeypatch.delenv("GLUE_CREDENTIALS_DIR")

    config = load_config()

    assert config.workflow_file == "glue.yaml"
    assert config.credentials.backend == "keyring"
    assert config.credentials.service_name == "glue-cli"
    assert config.history.directory == Path("~/.glue-history").expanduser()


def test_load_config_from_env(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
workflow_file: workflows.yaml
log_level: DEBUG
credentials:
  backend: inmemory
  service_name: glue-ci
"""
    )
    monkeypatch.setenv("GLUE_CONFIG", str(config_path))

    config = load_config()
    assert config.workflow_file == "workflows.yaml"
    assert config.log_level == "DEBUG"
    assert config.credentials.backend == "inmemory"
    assert config.credentials.service_name == "glue-ci"
    assert config.history.directory == tmp_path / "history"


def test_credential_store_uses_config(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("credentials:\n  backend: inmemory\n  service_name: svc\n")
    monkeypatch.setenv("GLUE_CONFIG", str(config_path))
    monkeypatch.delenv("GLUE_CREDENTIALS_BACKEND")

    store = get_credential_store()

    assert store.service_name == "svc"
    assert store._secure is not None
