from __future__ import annotations

from dataclasses import dataclass, field

from .config import DEFAULT_CONFIG

OUT_LOG = "out.log"
PIPELINE_PID = "pipeline.pid"
PIPELINE_YML = "pipeline.yml"
STATUS_LOG = "status.log"
EVENTS_LOG = "events.jsonl"


@dataclass
class Env:
    """
    Server side layout of one project.

    <hmd_root>/<project>/git        bare repository
    <hmd_root>/<project>/work-tree  checkout, pipeline files and logs
    """
    project: str
    ssh_address: str
    hmd_root: str = DEFAULT_CONFIG.hmd_root
    project_dir: str = field(init=False)
    git_dir: str = field(init=False)
    work_tree: str = field(init=False)

    def __post_init__(self) -> None:
        self.project_dir = f"{self.hmd_root}/{self.project}"
        self.git_dir = f"{self.project_dir}/git"
        self.work_tree = f"{self.project_dir}/work-tree"

    def out_log(self) -> str:
        return f"{self.work_tree}/{OUT_LOG}"

    def status_log(self) -> str:
        return f"{self.work_tree}/{STATUS_LOG}"

    def pipeline_pid(self) -> str:
        return f"{self.work_tree}/{PIPELINE_PID}"
