from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


DEFAULT_STAGES: Dict[str, str] = {
    "lint": "cargo clippy",
    "test": "cargo test",
    "build": "cargo build --release",
    "run": "cargo run --release",
}

RESERVED_KEYS = ("ssh_address", "project", "artifacts")


class ProjectYml(BaseModel):
    """
    hmd.yml: connection, artifacts and stages of one project.

    Stages are stored flat next to the other keys in the file
    (`build: make`), insertion order is the execution order.
    """
    ssh_address: str = ""
    project: str = ""
    artifacts: List[str] = Field(default_factory=list)
    stages: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_STAGES))

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "ProjectYml":
        stages = {k: v for k, v in data.items() if k not in RESERVED_KEYS}
        fields = {k: data[k] for k in RESERVED_KEYS if k in data}
        return cls.model_validate({**fields, "stages": stages})

    def to_mapping(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "ssh_address": self.ssh_address,
            "project": self.project,
            "artifacts": list(self.artifacts),
        }
        out.update(self.stages)
        return out


class GlobalConfigYml(BaseModel):
    ssh_address: str
