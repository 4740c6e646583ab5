from __future__ import annotations

from enum import Enum
from typing import List, Literal

from pydantic import BaseModel, Field


StageEvent = Literal["run", "complete", "panic"]


class StageState(str, Enum):
    DONE = "done"
    RUNNING = "running"
    PENDING = "pending"
    FAILED = "failed"
    BLOCKED = "blocked"

    @property
    def glyph(self) -> str:
        return GLYPHS[self]


# status.log consumers parse these, do not change them
GLYPHS = {
    StageState.DONE: "✅",
    StageState.RUNNING: "🟩",
    StageState.PENDING: "🟨",
    StageState.FAILED: "❌",
    StageState.BLOCKED: "🟥",
}


class StageLine(BaseModel):
    stage: str
    state: StageState

    def render(self) -> str:
        return f"{self.state.glyph} {self.stage}"


class StatusRecord(BaseModel):
    """
    One full rendering of status.log.

    `event`/`index` record which transition produced it; a `panic` record
    is the abort signal the pipeline runner has to act on.
    """
    event: StageEvent
    index: int
    lines: List[StageLine] = Field(default_factory=list)
    timestamp: str

    @property
    def aborted(self) -> bool:
        return self.event == "panic"

    def render(self) -> str:
        rows = [line.render() for line in self.lines]
        rows.append(self.timestamp)
        return "\n".join(rows) + "\n"
