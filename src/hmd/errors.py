"""
errors.py
- Purpose: HmdError hierarchy shared by tracker, runner and CLI commands.
- Pattern: raise in library code, the CLI prints `[ERR] ...` and exits 1.
"""
from __future__ import annotations

from dataclasses import dataclass


class HmdError(Exception):
    """Base class for every error the CLI reports to the user."""


class ProjectConfigError(HmdError):
    pass


class GlobalConfigError(HmdError):
    pass


class StatusWriteError(HmdError):
    pass


class StageIndexError(HmdError, IndexError):
    def __init__(self, index: int, total: int):
        self.index = index
        self.total = total
        super().__init__(f"Stage index {index} out of range for {total} stage(s)")


@dataclass
class CommandFailed(HmdError):
    command: str
    returncode: int

    def __str__(self) -> str:
        return f"Process terminated with exit status {self.returncode}: {self.command}"


@dataclass
class PipelineAborted(HmdError):
    stage: str
    index: int
    returncode: int

    def __str__(self) -> str:
        return f"Stage {self.index} ({self.stage}) failed with exit status {self.returncode}"
