from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .config import HmdConfig
from .errors import GlobalConfigError, ProjectConfigError
from .schemas import GlobalConfigYml, ProjectYml

logger = logging.getLogger(__name__)


def _load_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _dump_yaml(path: Path, data: Mapping[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(dict(data), f, sort_keys=False, allow_unicode=True)


def _invalid(path: Path, reason: Any) -> ProjectConfigError:
    return ProjectConfigError(
        f"Can't read {path.name} file. Invalid format. Try `hmd init` to overwrite: {reason}"
    )


# ---------- hmd.yml ----------

def read_project_yml(cfg: HmdConfig) -> ProjectYml:
    path = Path(cfg.project_yml)
    try:
        data = _load_yaml(path)
    except FileNotFoundError as e:
        raise ProjectConfigError(f"No {path.name} file. Try `hmd init`: {e}") from e
    except yaml.YAMLError as e:
        raise _invalid(path, e) from e

    if not isinstance(data, dict):
        raise _invalid(path, "expected a mapping at top level")
    if "ssh_address" not in data:
        raise _invalid(path, "Field `ssh_address` is missing")
    try:
        project_yml = ProjectYml.from_mapping(data)
    except ValidationError as e:
        raise _invalid(path, e) from e

    if not project_yml.project:
        raise _invalid(path, "Field `project` can't be empty")
    if not project_yml.stages:
        raise _invalid(path, "No stages")
    return project_yml


def write_project_yml(cfg: HmdConfig, project: str, ssh_address: str) -> ProjectYml:
    """Write hmd.yml, keeping stages and artifacts of a readable existing file."""
    try:
        base = read_project_yml(cfg)
    except ProjectConfigError as e:
        logger.debug("starting from default hmd.yml: %s", e)
        base = ProjectYml()

    project_yml = base.model_copy(update={"project": project, "ssh_address": ssh_address})
    _dump_yaml(Path(cfg.project_yml), project_yml.to_mapping())
    return project_yml


# ---------- ~/.hmd/config.yml ----------

def global_config_path(cfg: HmdConfig) -> Path:
    return Path(cfg.config_yml).expanduser()


def read_global_config(cfg: HmdConfig) -> GlobalConfigYml:
    path = global_config_path(cfg)
    try:
        data = _load_yaml(path)
        return GlobalConfigYml.model_validate(data)
    except FileNotFoundError as e:
        raise GlobalConfigError(f"No hmd config at {path}") from e
    except (yaml.YAMLError, ValidationError) as e:
        raise GlobalConfigError(f"Can't read hmd config: {e}") from e


def write_global_config(cfg: HmdConfig, ssh_address: str) -> Path:
    path = global_config_path(cfg)
    _dump_yaml(path, GlobalConfigYml(ssh_address=ssh_address).model_dump())
    return path


# ---------- pipeline.yml ----------

def write_pipeline_yml(path: Path, stages: Mapping[str, str]) -> None:
    _dump_yaml(path, stages)


def read_pipeline_yml(path: Path) -> Dict[str, str]:
    try:
        data = _load_yaml(path)
    except FileNotFoundError as e:
        raise ProjectConfigError(f"No pipeline file at {path}") from e
    except yaml.YAMLError as e:
        raise ProjectConfigError(f"Can't read pipeline file {path}: {e}") from e

    if not isinstance(data, dict) or not data:
        raise ProjectConfigError(f"No stages in pipeline file {path}")
    bad = [k for k, v in data.items() if not isinstance(k, str) or not isinstance(v, str)]
    if bad:
        raise ProjectConfigError(f"Stage commands must be strings: {', '.join(map(str, bad))}")
    return data
