import pytest
import yaml

from hmd.config import HmdConfig
from hmd.errors import GlobalConfigError, ProjectConfigError
from hmd.project_files import (
    read_global_config,
    read_pipeline_yml,
    read_project_yml,
    write_global_config,
    write_pipeline_yml,
    write_project_yml,
)
from hmd.schemas import DEFAULT_STAGES


@pytest.fixture
def cfg(tmp_path):
    return HmdConfig(
        project_yml=str(tmp_path / "hmd.yml"),
        config_yml=str(tmp_path / "home" / ".hmd" / "config.yml"),
    )


def write(path, text):
    path.write_text(text, encoding="utf-8")


def test_stages_keep_file_order(cfg, tmp_path):
    write(tmp_path / "hmd.yml", (
        "ssh_address: pi@10.0.0.2\n"
        "project: blog\n"
        "artifacts: [.env]\n"
        "restart: systemctl --user restart blog\n"
        "build: make\n"
        "push: ./push.sh\n"
    ))
    project_yml = read_project_yml(cfg)

    assert project_yml.project == "blog"
    assert project_yml.ssh_address == "pi@10.0.0.2"
    assert project_yml.artifacts == [".env"]
    assert list(project_yml.stages) == ["restart", "build", "push"]


def test_missing_project_file(cfg):
    with pytest.raises(ProjectConfigError, match="Try `hmd init`"):
        read_project_yml(cfg)


@pytest.mark.parametrize("text", [
    "project: [unclosed\n",
    "- just\n- a list\n",
    "ssh_address: a\nproject: b\nbuild: {nested: 1}\n",
])
def test_invalid_project_file(cfg, tmp_path, text):
    write(tmp_path / "hmd.yml", text)
    with pytest.raises(ProjectConfigError, match="Invalid format"):
        read_project_yml(cfg)


def test_empty_project_rejected(cfg, tmp_path):
    write(tmp_path / "hmd.yml", "ssh_address: a\nproject: ''\nbuild: make\n")
    with pytest.raises(ProjectConfigError, match="project"):
        read_project_yml(cfg)


def test_no_stages_rejected(cfg, tmp_path):
    write(tmp_path / "hmd.yml", "ssh_address: a\nproject: blog\n")
    with pytest.raises(ProjectConfigError, match="No stages"):
        read_project_yml(cfg)


def test_write_fresh_project_file_uses_default_stages(cfg, tmp_path):
    write_project_yml(cfg, "blog", "pi@10.0.0.2")

    data = yaml.safe_load((tmp_path / "hmd.yml").read_text(encoding="utf-8"))
    assert list(data)[:3] == ["ssh_address", "project", "artifacts"]
    assert data["project"] == "blog"
    assert read_project_yml(cfg).stages == DEFAULT_STAGES


def test_write_keeps_existing_stages(cfg, tmp_path):
    write(tmp_path / "hmd.yml", "ssh_address: old\nproject: old\nartifacts: [a.txt]\ndeploy: ./run.sh\n")
    write_project_yml(cfg, "new", "pi@host")

    project_yml = read_project_yml(cfg)
    assert project_yml.project == "new"
    assert project_yml.ssh_address == "pi@host"
    assert project_yml.artifacts == ["a.txt"]
    assert project_yml.stages == {"deploy": "./run.sh"}


def test_global_config_round_trip(cfg):
    with pytest.raises(GlobalConfigError):
        read_global_config(cfg)

    path = write_global_config(cfg, "pi@10.0.0.2")
    assert path.exists()
    assert read_global_config(cfg).ssh_address == "pi@10.0.0.2"


def test_pipeline_file(tmp_path):
    path = tmp_path / "pipeline.yml"
    write_pipeline_yml(path, {"test": "pytest -q", "run": "python -m app"})
    assert list(read_pipeline_yml(path).items()) == [("test", "pytest -q"), ("run", "python -m app")]


@pytest.mark.parametrize("text", ["", "build: 3\n", "- a\n"])
def test_bad_pipeline_file(tmp_path, text):
    path = tmp_path / "pipeline.yml"
    write(path, text)
    with pytest.raises(ProjectConfigError):
        read_pipeline_yml(path)


def test_missing_ssh_address_key_rejected(cfg, tmp_path):
    write(tmp_path / "hmd.yml", "project: blog\nbuild: make\n")
    with pytest.raises(ProjectConfigError, match="ssh_address"):
        read_project_yml(cfg)
