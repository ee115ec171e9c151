"""Tests for lxc_driver.executor module."""

import subprocess
from unittest.mock import MagicMock

import pytest

from lxc_driver.exceptions import CommandTimeoutError, ConfigurationError, ExecuteError
from lxc_driver.executor import CommandOutput, RunOptions, SudoWrapper


@pytest.fixture
def mock_subprocess_run(monkeypatch, completed_process):
    """Mock subprocess.run to succeed with empty output."""
    run = MagicMock(return_value=completed_process())
    monkeypatch.setattr(subprocess, "run", run)
    return run


class TestSudoWrapperInit:
    """Tests for SudoWrapper initialization."""

    def test_init_default_parameters(self):
        """Test initialization with default parameters."""
        wrapper = SudoWrapper()
        assert wrapper.wrapper_path is None
        assert wrapper.use_sudo is True
        assert wrapper.command_prefix == "lxc-"
        assert wrapper.retry_attempts == 3
        assert wrapper.retry_interval == 1.0
        assert wrapper.command_timeout is None

    def test_retry_attempts_at_least_one(self):
        """Test non-positive attempts are clamped to one."""
        assert SudoWrapper(retry_attempts=0).retry_attempts == 1


class TestSudoWrapperBuildCommand:
    """Tests for build_command method."""

    def test_with_sudo(self):
        """Test sudo is prepended."""
        assert SudoWrapper().build_command("ls") == ["sudo", "lxc-ls"]

    def test_with_wrapper_path(self):
        """Test the wrapper sits between sudo and the tool."""
        wrapper = SudoWrapper(wrapper_path="/usr/local/bin/lxc-wrapper")
        assert wrapper.build_command("info", "--name", "web") == [
            "sudo",
            "/usr/local/bin/lxc-wrapper",
            "lxc-info",
            "--name",
            "web",
        ]

    def test_without_sudo(self):
        """Test commands can run without sudo."""
        wrapper = SudoWrapper(use_sudo=False)
        assert wrapper.build_command("stop", "--name", "web") == ["lxc-stop", "--name", "web"]


class TestSudoWrapperRun:
    """Tests for run method."""

    def test_run_returns_stdout(self, mock_subprocess_run, completed_process):
        """Test stdout is returned with normalized line endings."""
        mock_subprocess_run.return_value = completed_process(stdout="a\r\nb\r\n")

        output = SudoWrapper().run("ls")

        assert output == "a\nb\n"
        mock_subprocess_run.assert_called_once_with(
            ["sudo", "lxc-ls"], capture_output=True, text=True, check=False, timeout=None
        )

    def test_run_show_stderr(self, mock_subprocess_run, completed_process):
        """Test show_stderr returns both streams."""
        mock_subprocess_run.return_value = completed_process(stdout="", stderr="--namespaces")

        output = SudoWrapper().run("attach", "-h", options=RunOptions(show_stderr=True))

        assert output == CommandOutput(stdout="", stderr="--namespaces")

    def test_run_failure_raises(self, mock_subprocess_run, completed_process):
        """Test non-zero exit raises ExecuteError with captured output."""
        mock_subprocess_run.return_value = completed_process(
            returncode=1, stdout="", stderr="Container already exists"
        )

        with pytest.raises(ExecuteError) as exc_info:
            SudoWrapper().run("create", "--name", "web")

        error = exc_info.value
        assert error.exitcode == 1
        assert error.stderr == "Container already exists"
        assert error.command == ["sudo", "lxc-create", "--name", "web"]
        assert mock_subprocess_run.call_count == 1

    def test_non_retryable_not_retried(self, mock_subprocess_run, completed_process, fake_clock):
        """Test failures of non-retryable calls are raised immediately."""
        mock_subprocess_run.return_value = completed_process(returncode=1, stderr="busy")

        with pytest.raises(ExecuteError):
            SudoWrapper().run("stop", "--name", "web")

        assert mock_subprocess_run.call_count == 1
        assert fake_clock.sleeps == []

    def test_retryable_retries_until_success(
        self, mock_subprocess_run, completed_process, fake_clock
    ):
        """Test retryable calls are retried after transient failures."""
        mock_subprocess_run.side_effect = [
            completed_process(returncode=1, stderr="busy"),
            completed_process(stdout="state: RUNNING\n"),
        ]

        output = SudoWrapper(retry_interval=0.5).run(
            "info", "--name", "web", options=RunOptions(retryable=True)
        )

        assert output == "state: RUNNING\n"
        assert mock_subprocess_run.call_count == 2
        assert fake_clock.sleeps == [0.5]

    def test_retryable_gives_up(self, mock_subprocess_run, completed_process, fake_clock):
        """Test retryable calls raise after the last attempt."""
        mock_subprocess_run.return_value = completed_process(returncode=1, stderr="busy")

        with pytest.raises(ExecuteError):
            SudoWrapper(retry_attempts=3).run(
                "info", "--name", "web", options=RunOptions(retryable=True)
            )

        assert mock_subprocess_run.call_count == 3
        assert len(fake_clock.sleeps) == 2

    def test_missing_executable(self, monkeypatch):
        """Test a missing binary raises ConfigurationError."""

        def run(*args, **kwargs):
            raise FileNotFoundError("No such file or directory: 'sudo'")

        monkeypatch.setattr(subprocess, "run", run)

        with pytest.raises(ConfigurationError) as exc_info:
            SudoWrapper().run("ls")

        assert "sudo" in str(exc_info.value)
        assert exc_info.value.details["command"] == ["sudo", "lxc-ls"]


class TestSudoWrapperTimeout:
    """Tests for command time limits."""

    def test_command_timeout_passed_to_subprocess(self, mock_subprocess_run):
        """Test the wrapper limit bounds every run."""
        SudoWrapper(command_timeout=30.0).run("ls")

        assert mock_subprocess_run.call_args.kwargs["timeout"] == 30.0

    def test_call_timeout_shortens_limit(self, mock_subprocess_run, fake_clock):
        """Test a per-call limit tighter than the wrapper's wins."""
        SudoWrapper(command_timeout=30.0).run("info", options=RunOptions(timeout=2.0))

        assert mock_subprocess_run.call_args.kwargs["timeout"] == 2.0

    def test_wrapper_limit_caps_call_timeout(self, mock_subprocess_run, fake_clock):
        """Test a per-call limit cannot extend the wrapper's."""
        SudoWrapper(command_timeout=1.0).run("info", options=RunOptions(timeout=10.0))

        assert mock_subprocess_run.call_args.kwargs["timeout"] == 1.0

    def test_timeout_raises_command_timeout_error(self, monkeypatch, fake_clock):
        """Test an expired run raises CommandTimeoutError carrying partial output."""
        run = MagicMock(
            side_effect=subprocess.TimeoutExpired(
                ["sudo", "lxc-info"], 2.0, output=b"state:", stderr=None
            )
        )
        monkeypatch.setattr(subprocess, "run", run)

        with pytest.raises(CommandTimeoutError) as exc_info:
            SudoWrapper(retry_attempts=3).run(
                "info", options=RunOptions(retryable=True, timeout=2.0)
            )

        error = exc_info.value
        assert isinstance(error, ExecuteError)
        assert error.timeout == 2.0
        assert error.stdout == "state:"
        assert error.stderr == ""
        assert error.command == ["sudo", "lxc-info"]
        # timeouts are not retried
        assert run.call_count == 1
        assert fake_clock.sleeps == []

    def test_retry_uses_remaining_budget(
        self, mock_subprocess_run, completed_process, fake_clock
    ):
        """Test a retried attempt only gets the time left of the call budget."""
        mock_subprocess_run.side_effect = [
            completed_process(returncode=1, stderr="busy"),
            completed_process(stdout="state: RUNNING\n"),
        ]

        SudoWrapper(retry_interval=0.5).run(
            "info", options=RunOptions(retryable=True, timeout=2.0)
        )

        timeouts = [c.kwargs["timeout"] for c in mock_subprocess_run.call_args_list]
        assert timeouts == [2.0, pytest.approx(1.5)]

    def test_no_retry_past_budget(self, mock_subprocess_run, completed_process, fake_clock):
        """Test no retry is attempted when the wait would exceed the budget."""
        mock_subprocess_run.return_value = completed_process(returncode=1, stderr="busy")

        with pytest.raises(ExecuteError):
            SudoWrapper(retry_interval=1.0).run(
                "info", options=RunOptions(retryable=True, timeout=0.5)
            )

        assert mock_subprocess_run.call_count == 1
        assert fake_clock.sleeps == []
