from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .config import HmdConfig
from .env import Env, OUT_LOG, PIPELINE_PID, PIPELINE_YML
from .errors import GlobalConfigError, HmdError, ProjectConfigError
from .project_files import (
    read_global_config,
    read_project_yml,
    write_global_config,
    write_pipeline_yml,
    write_project_yml,
)
from .remote import exec_verbose, git_branch, kill_and_wait_cmd, run_verbose, scp, ssh
from .schemas import ProjectYml
from .utils.ui import badge_ok

logger = logging.getLogger(__name__)

PROJECT_NOT_PROVIDED = "Project not provided"


# ---------- resolution ----------

def get_ssh_address(cfg: HmdConfig, ssh_address: Optional[str]) -> str:
    """--ssh, then hmd.yml, then ~/.hmd/config.yml."""
    if ssh_address:
        return ssh_address
    try:
        from_project = read_project_yml(cfg).ssh_address
        if from_project:
            return from_project
    except ProjectConfigError as e:
        logger.debug("no ssh address from hmd.yml: %s", e)
    try:
        from_global = read_global_config(cfg).ssh_address
        if from_global:
            return from_global
    except GlobalConfigError as e:
        logger.debug("no ssh address from global config: %s", e)
    raise HmdError("SSH address not provided")


def get_project(cfg: HmdConfig, project: Optional[str]) -> str:
    """--project, then hmd.yml."""
    if project:
        return project
    try:
        return read_project_yml(cfg).project
    except ProjectConfigError as e:
        raise HmdError(f"{PROJECT_NOT_PROVIDED}: {e}") from e


def current_dir_project() -> str:
    name = Path.cwd().name
    if not name:
        raise HmdError("Can't parse project name from current dir")
    return name


def make_env(cfg: HmdConfig, project: str, ssh_address: str) -> Env:
    return Env(project=project, ssh_address=ssh_address, hmd_root=cfg.hmd_root)


# ---------- init ----------

def init(cfg: HmdConfig, env: Env) -> None:
    exec_verbose(ssh(
        env.ssh_address,
        f"mkdir -p {env.git_dir} {env.work_tree};",
        f"cd {env.git_dir};",
        "git init --bare;",
    ))
    write_project_yml(cfg, env.project, env.ssh_address)
    try:
        read_global_config(cfg)
    except GlobalConfigError:
        path = write_global_config(cfg, env.ssh_address)
        badge_ok(f"Config created at {path}")


# ---------- deploy ----------

def git_push(env: Env) -> None:
    run_verbose(f"git push --force {env.ssh_address}:{env.git_dir} HEAD")


def git_push_dirty(env: Env) -> None:
    """Push staged and unstaged changes as two temporary commits, then undo them."""
    run_verbose("git commit -m staged --allow-empty")
    run_verbose("git add .")
    run_verbose("git commit -m unstaged --allow-empty")
    try:
        git_push(env)
    finally:
        run_verbose("git reset HEAD~1")
        run_verbose("git reset HEAD~1 --soft")


def start_pipeline_cmd(cfg: HmdConfig) -> str:
    return (
        f"nohup {cfg.remote_bin} pipeline {PIPELINE_YML} > {OUT_LOG} 2>&1 & "
        f"echo $! > {PIPELINE_PID};"
    )


def upload(env: Env, files: List[str]) -> None:
    if not files:
        return
    exec_verbose(scp(files, env.ssh_address, env.work_tree))


def run_pipeline_remote(cfg: HmdConfig, env: Env, checkout: bool = True) -> None:
    parts = [
        "source .profile;",
        f"cd {env.work_tree};",
        kill_and_wait_cmd(PIPELINE_PID),
    ]
    if checkout:
        # git does not expand ~ in --git-dir
        git_dir = env.git_dir.replace("~", "$HOME", 1)
        parts.append(f"git --git-dir={git_dir} --work-tree=. checkout --force {git_branch()};")
    parts.append(start_pipeline_cmd(cfg))
    exec_verbose(ssh(env.ssh_address, *parts))


def deploy(cfg: HmdConfig, env: Env, project_yml: ProjectYml, dirty: bool = False) -> None:
    if not env.ssh_address:
        raise HmdError("SSH address not provided")
    if dirty:
        git_push_dirty(env)
    else:
        git_push(env)

    pipeline_yml = Path(PIPELINE_YML)
    write_pipeline_yml(pipeline_yml, project_yml.stages)
    try:
        upload(env, [*project_yml.artifacts, PIPELINE_YML])
    finally:
        pipeline_yml.unlink(missing_ok=True)
    run_pipeline_remote(cfg, env)


# ---------- pipeline control ----------

def stop(env: Env) -> None:
    exec_verbose(ssh(env.ssh_address, kill_and_wait_cmd(env.pipeline_pid())))


def restart(cfg: HmdConfig, env: Env) -> None:
    run_pipeline_remote(cfg, env, checkout=False)


def status(env: Env, follow: bool = True) -> None:
    # -F reopens by name, every update replaces the file
    reader = "tail -F" if follow else "cat"
    exec_verbose(ssh(env.ssh_address, f"{reader} {env.status_log()}"))


def log(env: Env, lines: int = 50, follow: bool = True) -> None:
    flag = " -f" if follow else ""
    exec_verbose(ssh(env.ssh_address, f"tail -n {lines}{flag} {env.out_log()}"))


def list_projects(cfg: HmdConfig, ssh_address: str) -> None:
    exec_verbose(ssh(ssh_address, f"ls {cfg.hmd_root}"))


def open_shell(env: Env) -> None:
    exec_verbose(ssh(env.ssh_address, f"cd {env.work_tree}; exec $SHELL -l", tty=True))


def remove(env: Env) -> None:
    exec_verbose(ssh(
        env.ssh_address,
        kill_and_wait_cmd(env.pipeline_pid()),
        f"rm -rf {env.project_dir}",
    ))
