from __future__ import annotations

from .status import (
    GLYPHS,
    StageEvent,
    StageLine,
    StageState,
    StatusRecord,
)

from .project import (
    DEFAULT_STAGES,
    GlobalConfigYml,
    ProjectYml,
)


__all__ = [
    "GLYPHS",
    "StageEvent",
    "StageLine",
    "StageState",
    "StatusRecord",
    "DEFAULT_STAGES",
    "GlobalConfigYml",
    "ProjectYml",
]
