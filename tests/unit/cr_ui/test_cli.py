"""CLI option handling and exit codes."""

import importlib

import pytest
from typer.testing import CliRunner

from cr_common.errors import RunInterruptedError, SetupError

cli = importlib.import_module("cr_ui.cli.main")

pytestmark = pytest.mark.unit_ui

runner = CliRunner()


class FakeCoordinator:
    instances: list["FakeCoordinator"] = []
    exit_code = 0
    error: Exception | None = None

    def __init__(self, options, *, runner=None, ui=None):
        self.options = options
        self.runner = runner
        FakeCoordinator.instances.append(self)

    def run(self):
        if FakeCoordinator.error is not None:
            raise FakeCoordinator.error
        return type("Report", (), {"exit_code": FakeCoordinator.exit_code})()


@pytest.fixture(autouse=True)
def fake_coordinator(monkeypatch):
    FakeCoordinator.instances = []
    FakeCoordinator.exit_code = 0
    FakeCoordinator.error = None
    monkeypatch.setattr(cli, "RunCoordinator", FakeCoordinator)
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    for var in ("JOB_NAME", "BUILD_ID", "CUCUMBER_TAGS", "CUCUMBER_SLOW_TAGS"):
        monkeypatch.delenv(var, raising=False)
    return FakeCoordinator


def test_missing_build_name_is_setup_failure(fake_coordinator):
    result = runner.invoke(cli.app, [])
    assert result.exit_code == cli.EXIT_SETUP
    assert "Must specify build name" in result.output
    assert fake_coordinator.instances == []


def test_options_are_normalized(fake_coordinator, tmp_path):
    result = runner.invoke(
        cli.app,
        [
            "--path", str(tmp_path),
            "--name", "Shop",
            "--id", "42",
            "--tags", "@fast",
            "--tags", "~@wip",
            "--slowtags", "@slow",
            "--maxruns", "3",
            "--commit",
        ],
    )
    assert result.exit_code == 0, result.output
    options = fake_coordinator.instances[0].options
    assert options.build_name == "shop"
    assert options.build_id == "42"
    assert options.tags == ["@fast", "~@wip"]
    assert options.slow_tags == ["@slow"]
    assert options.max_runs == 3
    assert options.commit is True
    assert options.path == tmp_path


def test_environment_provides_name_and_tags(fake_coordinator, monkeypatch):
    monkeypatch.setenv("JOB_NAME", "nightly")
    monkeypatch.setenv("BUILD_ID", "77")
    monkeypatch.setenv("CUCUMBER_TAGS", "@a, ~@b")
    monkeypatch.setenv("CUCUMBER_SLOW_TAGS", "@slow")
    result = runner.invoke(cli.app, [])
    assert result.exit_code == 0, result.output
    options = fake_coordinator.instances[0].options
    assert (options.build_name, options.build_id) == ("nightly", "77")
    assert options.tags == ["@a", "~@b"]
    assert options.slow_tags == ["@slow"]


def test_random_build_id_when_unset(fake_coordinator):
    result = runner.invoke(cli.app, ["--name", "shop"])
    assert result.exit_code == 0
    assert len(fake_coordinator.instances[0].options.build_id) == 8


def test_negative_maxruns_rejected(fake_coordinator):
    result = runner.invoke(cli.app, ["--name", "shop", "--maxruns", "-1"])
    assert result.exit_code != 0
    assert fake_coordinator.instances == []


def test_report_exit_code_is_propagated(fake_coordinator):
    fake_coordinator.exit_code = 1
    result = runner.invoke(cli.app, ["--name", "shop"])
    assert result.exit_code == cli.EXIT_FAILURE


def test_setup_error_exits_with_setup_code(fake_coordinator):
    fake_coordinator.error = SetupError("Building image shop failed: exit status 1")
    result = runner.invoke(cli.app, ["--name", "shop"])
    assert result.exit_code == cli.EXIT_SETUP
    assert "Building image shop failed" in result.output


def test_interrupt_exits_with_failure(fake_coordinator):
    fake_coordinator.error = RunInterruptedError("CI runner killed")
    result = runner.invoke(cli.app, ["--name", "shop"])
    assert result.exit_code == cli.EXIT_FAILURE
