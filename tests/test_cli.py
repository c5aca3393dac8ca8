"""Tests for the taskdock CLI."""

import json

import pytest
from click.testing import CliRunner

from taskdock.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, tmp_path):
    def _invoke(task_file, *args):
        return runner.invoke(
            main,
            ["-t", str(task_file), "-e", str(tmp_path / "missing.env"), "--log-level", "ERROR", *args],
        )
    return _invoke


def test_validate_ok(invoke, write_task_file):
    path = write_task_file({"build": {"steps": [{"image": "node", "command": ["node", "--version"]}]}})

    result = invoke(path, "validate")

    assert result.exit_code == 0
    assert "is valid (1 tasks)" in result.output


def test_validate_reports_every_error(invoke, write_task_file):
    path = write_task_file({
        "build": {"steps": [{"mounts": ["./src:/app:x"]}]},
        "ship": {"steps": [{"follow": "missing-task"}]},
    })

    result = invoke(path, "validate")

    assert result.exit_code == 1
    assert "task 'build': image is required" in result.output
    assert "mount directory './src:/app:x' is invalid" in result.output
    assert "task 'ship': follow task 'missing-task' does not exist" in result.output


def test_validate_unresolved_variable(invoke, write_task_file, monkeypatch):
    monkeypatch.delenv("TASKDOCK_CLI_SECRET", raising=False)
    path = write_task_file({"envs": ["KEY=`$TASKDOCK_CLI_SECRET`"], "build": {"steps": [{"image": "node"}]}})

    result = invoke(path, "validate")

    assert result.exit_code == 1
    assert "TASKDOCK_CLI_SECRET" in result.output


def test_list(invoke, write_task_file):
    path = write_task_file({
        "build": {"steps": [{"image": "node"}, {"image": "node"}]},
        "test": {"steps": [{"image": "node"}]},
    })

    result = invoke(path, "list")

    assert result.exit_code == 0
    assert result.output.splitlines() == ["build (2 steps)", "test (1 step)"]


def test_plan(invoke, write_task_file, tmp_path, monkeypatch):
    monkeypatch.setenv("TASKDOCK_CLI_SRC", str(tmp_path))
    path = write_task_file({
        "build": {"steps": [{
            "image": "node",
            "command": ["npm", "test"],
            "mounts": ["`$TASKDOCK_CLI_SRC`:/app:w"],
        }]},
    })

    result = invoke(path, "plan", "build")

    assert result.exit_code == 0
    [plan] = json.loads(result.output)
    assert plan["image"] == "node"
    assert plan["commands"] == [["npm", "test"]]
    assert plan["mounts"] == [
        {"type": "bind", "source": str(tmp_path), "target": "/app", "read_only": False},
    ]


def test_plan_unknown_task(invoke, write_task_file):
    path = write_task_file({"build": {"steps": [{"image": "node"}]}})

    result = invoke(path, "plan", "deploy")

    assert result.exit_code == 1
    assert "task 'deploy' does not exist" in result.output


def test_missing_task_file(invoke, tmp_path):
    result = invoke(tmp_path / "absent.yaml", "validate")
    assert result.exit_code != 0


def test_invalid_log_level_option(runner, write_task_file):
    path = write_task_file({"build": {"steps": [{"image": "node"}]}})

    result = runner.invoke(main, ["-t", str(path), "--log-level", "BOGUS", "list"])

    assert result.exit_code == 2
    assert "BOGUS" in result.output
    assert not isinstance(result.exception, AttributeError)


def test_invalid_log_level_env_var(runner, write_task_file, monkeypatch):
    monkeypatch.setenv("TASKDOCK_LOG_LEVEL", "bogus")
    path = write_task_file({"build": {"steps": [{"image": "node"}]}})

    result = runner.invoke(main, ["-t", str(path), "list"])

    assert result.exit_code == 2
    assert "Invalid log level 'BOGUS'" in result.output


def test_log_level_option_case_insensitive(runner, write_task_file, tmp_path):
    path = write_task_file({"build": {"steps": [{"image": "node"}]}})

    result = runner.invoke(
        main, ["-t", str(path), "-e", str(tmp_path / "missing.env"), "--log-level", "error", "list"]
    )

    assert result.exit_code == 0
    assert result.output.splitlines() == ["build (1 step)"]
