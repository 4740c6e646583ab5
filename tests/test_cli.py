import pytest
from typer.testing import CliRunner

from hmd import __version__
from hmd.cli import app


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def work_tree(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return tmp_path


def status_lines(work_tree):
    return (work_tree / "status.log").read_text(encoding="utf-8").splitlines()


def test_pipeline_command_success(runner, work_tree):
    (work_tree / "pipeline.yml").write_text("push: 'true'\nbuild: 'true'\nrestart: 'true'\n", encoding="utf-8")

    result = runner.invoke(app, ["pipeline"])

    assert result.exit_code == 0, result.output
    assert status_lines(work_tree)[:-1] == ["✅ push", "✅ build", "✅ restart"]
    assert len(status_lines(work_tree)) == 4


def test_pipeline_command_exits_1_on_failed_stage(runner, work_tree):
    (work_tree / "pipeline.yml").write_text("push: 'true'\nbuild: exit 3\nrestart: 'true'\n", encoding="utf-8")

    result = runner.invoke(app, ["pipeline", "pipeline.yml"])

    assert result.exit_code == 1
    assert status_lines(work_tree)[:-1] == ["✅ push", "❌ build", "🟥 restart"]
    assert "[ERR]" in result.output


def test_pipeline_command_without_file(runner, work_tree):
    result = runner.invoke(app, ["pipeline"])
    assert result.exit_code == 1
    assert not (work_tree / "status.log").exists()


def test_deploy_without_project_file(runner, work_tree):
    result = runner.invoke(app, ["deploy"])
    assert result.exit_code == 1
    assert "hmd init" in result.output


def test_deploy_alias_is_registered(runner, work_tree):
    result = runner.invoke(app, ["d", "--help"])
    assert result.exit_code == 0
    assert "--dirty" in result.output


def test_remove_requires_explicit_project(runner, work_tree):
    (work_tree / "hmd.yml").write_text("ssh_address: pi@host\nproject: blog\nbuild: make\n", encoding="utf-8")
    result = runner.invoke(app, ["remove"])
    assert result.exit_code == 1
    assert "Project not provided" in result.output


def test_status_uses_project_file(runner, work_tree, monkeypatch):
    calls = []
    monkeypatch.setattr("hmd.commands.exec_verbose", calls.append)
    (work_tree / "hmd.yml").write_text("ssh_address: pi@host\nproject: blog\nbuild: make\n", encoding="utf-8")

    result = runner.invoke(app, ["s", "--no-follow"])

    assert result.exit_code == 0, result.output
    assert calls == [["ssh", "pi@host", "cat ~/.hmd/blog/work-tree/status.log"]]


def test_version_option(runner):
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == f"hmd {__version__}"


def test_help_lists_short_aliases(runner):
    result = runner.invoke(app, ["--help"], env={"COLUMNS": "200", "TERMINAL_WIDTH": "200"})
    assert result.exit_code == 0
    for alias in ("(alias: d)", "(alias: s)", "(alias: l)", "(alias: ls)", "(alias: o)"):
        assert alias in result.output


def test_deploy_with_empty_ssh_address_uses_global_config(runner, work_tree, monkeypatch):
    calls = []
    monkeypatch.setattr("hmd.commands.deploy", lambda cfg, env, project_yml, dirty=False: calls.append(env.ssh_address))
    (work_tree / "hmd.yml").write_text("ssh_address: ''\nproject: blog\nbuild: make\n", encoding="utf-8")
    (work_tree / "home" / ".hmd").mkdir(parents=True)
    (work_tree / "home" / ".hmd" / "config.yml").write_text("ssh_address: pi@host\n", encoding="utf-8")

    result = runner.invoke(app, ["deploy"])

    assert result.exit_code == 0, result.output
    assert calls == ["pi@host"]
