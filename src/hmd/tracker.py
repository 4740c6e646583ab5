from __future__ import annotations

import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .errors import StageIndexError, StatusWriteError
from .schemas import StageEvent, StageLine, StageState, StatusRecord

logger = logging.getLogger(__name__)


def timestamp() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime())


def stage_states(event: StageEvent, index: int, total: int) -> List[StageState]:
    """
    State of every stage after `event` at `index`.

      run      : [0, i) done, i running, (i, n) pending
      complete : [0, i] done, (i, n) pending
      panic    : [0, i) done, i failed, (i, n) blocked
    """
    if not 0 <= index < total:
        raise StageIndexError(index, total)

    if event == "run":
        current, after = StageState.RUNNING, StageState.PENDING
    elif event == "complete":
        current, after = StageState.DONE, StageState.PENDING
    elif event == "panic":
        current, after = StageState.FAILED, StageState.BLOCKED
    else:
        raise ValueError(f"Unknown stage event: {event}")

    states: List[StageState] = []
    for s in range(total):
        if s < index:
            states.append(StageState.DONE)
        elif s == index:
            states.append(current)
        else:
            states.append(after)
    return states


def render_status(event: StageEvent, index: int, stages: Sequence[str], ts: Optional[str] = None) -> StatusRecord:
    states = stage_states(event, index, len(stages))
    return StatusRecord(
        event=event,
        index=index,
        lines=[StageLine(stage=name, state=state) for name, state in zip(stages, states)],
        timestamp=ts or timestamp(),
    )


def _file_mode(path: Path) -> int:
    """Mode of the existing file, else what a plain open() would create."""
    try:
        return path.stat().st_mode & 0o777
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_atomic(path: Path, content: str) -> None:
    """Replace `path` with `content` via a temp file in the same directory."""
    temp_path: Optional[Path] = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w", dir=path.parent, delete=False, prefix=f".{path.name}.", encoding="utf-8"
        ) as f:
            f.write(content)
            temp_path = Path(f.name)
        # NamedTemporaryFile is 0600, status.log must stay readable by others
        os.chmod(temp_path, _file_mode(path))
        os.replace(temp_path, path)
    except OSError as e:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise StatusWriteError(f"Can't write status to {path}: {e}") from e


class StageTracker:
    """
    Renders pipeline progress into status.log.

    Every call rewrites the whole file; there is no history. One deploy
    process per project is assumed, concurrent writers are not handled.
    """

    def __init__(self, status_path: Path, clock: Callable[[], str] = timestamp):
        self.status_path = Path(status_path)
        self.clock = clock

    def run(self, index: int, stages: Sequence[str]) -> StatusRecord:
        return self._update("run", index, stages)

    def complete(self, index: int, stages: Sequence[str]) -> StatusRecord:
        return self._update("complete", index, stages)

    def panic(self, index: int, stages: Sequence[str]) -> StatusRecord:
        """Persist the failure. Callers must stop the pipeline on the returned record."""
        return self._update("panic", index, stages)

    def _update(self, event: StageEvent, index: int, stages: Sequence[str]) -> StatusRecord:
        record = render_status(event, index, stages, self.clock())
        write_atomic(self.status_path, record.render())
        logger.debug("status %s at %d/%d -> %s", event, index, len(stages), self.status_path)
        return record
