from __future__ import annotations

# ---- Environment bootstrap (MUST be first) ----
from dotenv import load_dotenv

# Load .env once at process start, before DEFAULT_CONFIG reads the environment
load_dotenv()

# ---- CLI imports ----
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer

from . import __version__, commands
from .config import DEFAULT_CONFIG
from .env import PIPELINE_YML, Env
from .errors import HmdError
from .pipeline import run_pipeline_in
from .project_files import read_pipeline_yml, read_project_yml
from .utils.ui import badge_err, setup_logging


HELP = """
Home Deploy Tool

Prerequisites: git, ssh, scp, configured ssh server, `hmd` on the server.

Useful git, ssh, scp commands to deploy your pet project in one line.
All stages are performed as a single process.
The last stage can launch the application.
It will be stopped the next time it is deployed
or after manually calling the stop command.
"""

app = typer.Typer(add_completion=False, help=HELP, no_args_is_help=True)

SshOption = typer.Option(None, "--ssh", help="Formats: login@ip, alias")
ProjectOption = typer.Option(None, "--project", "-p", help="Unique project name")


@contextmanager
def reported() -> Iterator[None]:
    """Turn HmdError into `[ERR] ...` and exit status 1."""
    try:
        yield
    except HmdError as e:
        badge_err(str(e))
        raise typer.Exit(code=1)


def _env(ssh: Optional[str], project: Optional[str]) -> Env:
    cfg = DEFAULT_CONFIG
    return commands.make_env(cfg, commands.get_project(cfg, project), commands.get_ssh_address(cfg, ssh))


def _version(value: bool):
    if value:
        typer.echo(f"hmd {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    version: bool = typer.Option(False, "--version", "-V", callback=_version, is_eager=True, help="Show version and exit"),
):
    setup_logging("DEBUG" if verbose else DEFAULT_CONFIG.log_level)


@app.command()
def init(ssh: Optional[str] = SshOption, project: Optional[str] = ProjectOption):
    """Create project folder at ssh server and init `hmd.yml`"""
    cfg = DEFAULT_CONFIG
    with reported():
        if not project:
            try:
                project = read_project_yml(cfg).project
            except HmdError:
                project = commands.current_dir_project()
        env = commands.make_env(cfg, project, commands.get_ssh_address(cfg, ssh))
        commands.init(cfg, env)


def deploy(dirty: bool = typer.Option(False, "--dirty", help="Push work tree with staged and unstaged changes")):
    """Push HEAD to server and run pipeline"""
    cfg = DEFAULT_CONFIG
    with reported():
        project_yml = read_project_yml(cfg)
        ssh_address = commands.get_ssh_address(cfg, project_yml.ssh_address or None)
        env = commands.make_env(cfg, project_yml.project, ssh_address)
        commands.deploy(cfg, env, project_yml, dirty=dirty)


@app.command()
def stop(ssh: Optional[str] = SshOption, project: Optional[str] = ProjectOption):
    """Stop pipeline"""
    with reported():
        commands.stop(_env(ssh, project))


@app.command()
def restart(ssh: Optional[str] = SshOption, project: Optional[str] = ProjectOption):
    """Restart pipeline"""
    with reported():
        commands.restart(DEFAULT_CONFIG, _env(ssh, project))


def status(
    ssh: Optional[str] = SshOption,
    project: Optional[str] = ProjectOption,
    follow: bool = typer.Option(True, "--follow/--no-follow", help="Keep watching status.log"),
):
    """Show pipeline status"""
    with reported():
        commands.status(_env(ssh, project), follow=follow)


def log(
    ssh: Optional[str] = SshOption,
    project: Optional[str] = ProjectOption,
    lines: int = typer.Option(DEFAULT_CONFIG.log_lines, "--lines", "-n", help="Lines of history"),
    follow: bool = typer.Option(True, "--follow/--no-follow", help="Keep streaming out.log"),
):
    """Stream pipeline log"""
    with reported():
        commands.log(_env(ssh, project), lines=lines, follow=follow)


def list_(ssh: Optional[str] = SshOption):
    """List projects at ssh server"""
    cfg = DEFAULT_CONFIG
    with reported():
        commands.list_projects(cfg, commands.get_ssh_address(cfg, ssh))


def open_(ssh: Optional[str] = SshOption, project: Optional[str] = ProjectOption):
    """Open working dir at ssh server"""
    with reported():
        commands.open_shell(_env(ssh, project))


@app.command()
def remove(ssh: Optional[str] = SshOption, project: Optional[str] = ProjectOption):
    """Remove project from server"""
    with reported():
        if not project:
            raise HmdError(commands.PROJECT_NOT_PROVIDED)
        commands.remove(commands.make_env(DEFAULT_CONFIG, project, commands.get_ssh_address(DEFAULT_CONFIG, ssh)))


@app.command(hidden=True)
def pipeline(file: Path = typer.Argument(Path(PIPELINE_YML), help="Pipeline file with `stage: command` pairs")):
    """Run the uploaded pipeline in the current directory (used on the server)"""
    with reported():
        stages = read_pipeline_yml(file)
        # PipelineAborted exits 1 after status.log shows the failure
        run_pipeline_in(Path.cwd(), stages)


# short aliases are hidden commands, listed in the help of the full name
for _func, _name, _alias in (
    (deploy, "deploy", "d"),
    (status, "status", "s"),
    (log, "log", "l"),
    (list_, "list", "ls"),
    (open_, "open", "o"),
):
    app.command(_name, help=f"{_func.__doc__} (alias: {_alias})")(_func)
    app.command(_alias, hidden=True)(_func)


if __name__ == "__main__":
    app()
