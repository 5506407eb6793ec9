from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel

DEFAULT_CONFIG_PATH = "~/.glue/config.yaml"


class HistoryConfig(BaseModel):
    """Where execution history records are written."""

    path: str = "~/.glue-history"

    @property
    def directory(self) -> Path:
        return Path(self.path).expanduser()


class CredentialsConfig(BaseModel):
    """Credential store settings."""

    backend: Literal["keyring", "file", "inmemory"] = "keyring"
    service_name: str = "glue-cli"
    path: str = "~/.glue-auth"

    @property
    def directory(self) -> Path:
        return Path(self.path).expanduser()


class GlueConfig(BaseModel):
    """Top-level configuration model."""

    workflow_file: str = "glue.yaml"
    log_level: str = "INFO"
    history: HistoryConfig = HistoryConfig()
    credentials: CredentialsConfig = CredentialsConfig()


def load_config(path: Optional[str] = None) -> GlueConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to GLUE_CONFIG env
            variable or ``~/.glue/config.yaml``.
    """

    config_path = os.path.expanduser(
        path or os.getenv("GLUE_CONFIG", DEFAULT_CONFIG_PATH)
    )
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = GlueConfig(**data)
    else:
        config = GlueConfig()

    env_history = os.getenv("GLUE_HISTORY_DIR")
    if env_history:
        config.history.path = env_history
    env_credentials = os.getenv("GLUE_CREDENTIALS_DIR")
    if env_credentials:
        config.credentials.path = env_credentials
    return config
