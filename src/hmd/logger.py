from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .tracker import timestamp


@dataclass
class EventLogger:
    """
    Pipeline event log (JSON Lines) in the work tree.

    status.log only holds the latest state; this file keeps every
    transition of the current run:
    - fixed fields (ts, stage, event)
    - meta dict for index, command, exit status, duration
    """
    log_path: Path

    def reset(self) -> None:
        self.log_path.unlink(missing_ok=True)

    def log(self, stage: str, event: str, meta: Optional[Dict[str, Any]] = None) -> None:
        record = {"ts": timestamp(), "stage": stage, "event": event, "meta": meta or {}}
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with self.log_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")

    def read(self) -> List[Dict[str, Any]]:
        if not self.log_path.exists():
            return []
        with self.log_path.open("r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
