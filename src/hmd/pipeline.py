from __future__ import annotations

import logging
import subprocess
import sys
import time
from pathlib import Path
from typing import Mapping, Optional, TextIO

from .env import EVENTS_LOG, STATUS_LOG
from .errors import PipelineAborted
from .logger import EventLogger
from .tracker import StageTracker, timestamp

logger = logging.getLogger(__name__)


def _echo(out: TextIO, text: str) -> None:
    out.write(text + "\n")
    out.flush()


def run_stage(command: str, cwd: Path) -> int:
    """Run one stage command through bash, output goes to our stdout/stderr."""
    sys.stdout.flush()
    proc = subprocess.run(command, shell=True, executable="/bin/bash", cwd=cwd, check=False)
    return proc.returncode


def run_pipeline(
    stages: Mapping[str, str],
    tracker: StageTracker,
    events: EventLogger,
    cwd: Path,
    out: Optional[TextIO] = None,
) -> None:
    """
    Execute stages in order, updating status.log at every transition.

    For stage i:
      run(i) -> command -> complete(i)
    and on a non-zero exit:
      panic(i) -> PipelineAborted, later stages never start
    """
    out = out or sys.stdout
    names = list(stages)

    for i, (stage, command) in enumerate(stages.items()):
        _echo(out, f"\n🟩 [{timestamp()}] > Start {stage}\n{command}\n")
        tracker.run(i, names)
        events.log(stage, "start", {"index": i, "command": command})

        started = time.monotonic()
        returncode = run_stage(command, cwd)
        elapsed = round(time.monotonic() - started, 3)

        if returncode != 0:
            _echo(out, f"\n❌ [{timestamp()}] > Failed {stage}\n")
            tracker.panic(i, names)
            events.log(stage, "fail", {"index": i, "returncode": returncode, "seconds": elapsed})
            logger.error("stage %s failed with exit status %d", stage, returncode)
            raise PipelineAborted(stage=stage, index=i, returncode=returncode)

        tracker.complete(i, names)
        events.log(stage, "done", {"index": i, "seconds": elapsed})
        _echo(out, f"\n🟩 [{timestamp()}] > End {stage}\n")

    events.log("pipeline", "done", {"stages": len(names)})


def run_pipeline_in(work_tree: Path, stages: Mapping[str, str], out: Optional[TextIO] = None) -> None:
    """Run with status.log and a fresh events.jsonl placed in `work_tree`."""
    tracker = StageTracker(work_tree / STATUS_LOG)
    events = EventLogger(log_path=work_tree / EVENTS_LOG)
    events.reset()
    run_pipeline(stages, tracker, events, cwd=work_tree, out=out)
