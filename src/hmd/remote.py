"""
Process helpers: ssh/scp/git invocation with the command echoed first.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import List, Sequence

from .errors import CommandFailed
from .utils.ui import print_command

log = logging.getLogger(__name__)


def exec_verbose(args: Sequence[str]) -> None:
    """Echo `args`, run with inherited stdio, raise CommandFailed on non-zero exit."""
    line = " ".join(args)
    print_command(line)
    log.debug("exec: %r", list(args))
    result = subprocess.run(list(args), check=False)
    if result.returncode != 0:
        raise CommandFailed(command=line, returncode=result.returncode)


def run_verbose(command: str) -> None:
    exec_verbose(shlex.split(command))


def ssh(ssh_address: str, *remote: str, tty: bool = False) -> List[str]:
    """ssh argv; remote parts are joined by ssh with spaces and run by the login shell."""
    args = ["ssh"]
    if tty:
        args.append("-t")
    args.append(ssh_address)
    args.extend(remote)
    return args


def scp(files: Sequence[str], ssh_address: str, remote_dir: str) -> List[str]:
    return ["scp", *files, f"{ssh_address}:{remote_dir}"]


def git_branch() -> str:
    result = subprocess.run(
        ["git", "branch", "--show-current"],
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        raise CommandFailed(command="git branch --show-current", returncode=result.returncode)
    return result.stdout.strip()


def kill_and_wait_cmd(pipeline_pid: str) -> str:
    """Interrupt the children of the pipeline process until none are left."""
    return f"while pkill -SIGINT -P `cat {pipeline_pid}` 2>/dev/null; do sleep 1; done;"
