from __future__ import annotations

from pydantic import BaseModel, Field
import os


class HmdConfig(BaseModel):
    """
    Global configuration for the CLI and the remote pipeline runner.

    Notes:
    - `hmd_root` is expanded by the remote shell, keep the leading `~`.
    - `config_yml` is local and expanded with `Path.expanduser`.
    """
    hmd_root: str = Field(default_factory=lambda: os.getenv("HMD_ROOT", "~/.hmd"))
    config_yml: str = Field(default_factory=lambda: os.getenv("HMD_CONFIG_YML", "~/.hmd/config.yml"))
    project_yml: str = Field(default_factory=lambda: os.getenv("HMD_PROJECT_YML", "hmd.yml"))

    # command used on the server to run the uploaded pipeline
    remote_bin: str = Field(default_factory=lambda: os.getenv("HMD_REMOTE_BIN", "hmd"))

    log_level: str = Field(default_factory=lambda: os.getenv("HMD_LOG_LEVEL", "WARNING"))
    log_lines: int = Field(default_factory=lambda: int(os.getenv("HMD_LOG_LINES", "50")))


DEFAULT_CONFIG = HmdConfig()
