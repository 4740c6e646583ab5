"""
User Interface Utilities.
Rich console output, badges and log handler setup.
File: src/hmd/utils/ui.py
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

# stdout for command echo, stderr for errors and logs
console = Console()
err_console = Console(stderr=True)


def badge_ok(msg: str) -> None:
    console.print(Text.assemble(("[OK] ", "bold green"), msg), soft_wrap=True)


def badge_err(msg: str) -> None:
    err_console.print(Text.assemble(("[ERR] ", "bold red"), msg), soft_wrap=True)


def print_command(line: str) -> None:
    """Echo an external command before it runs."""
    console.print()
    console.print(line, style="dim", markup=False, highlight=False, soft_wrap=True)


def setup_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
