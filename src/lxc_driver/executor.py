"""
Execution of lxc tools.

The driver talks to the ``lxc-*`` tools through an :class:`Executor`. Any
object with a matching ``run`` method works, which keeps the driver testable
with a simple double. :class:`SudoWrapper` is the production implementation:
it runs the tool under ``sudo`` (optionally through a wrapper script),
retries calls marked retryable and raises :class:`ExecuteError` on failure.
"""

import logging
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import Protocol

from .exceptions import CommandTimeoutError, ConfigurationError, ExecuteError

logger = logging.getLogger(__name__)

# lxc tools do not cope well with concurrent invocations
_lock = threading.Lock()


@dataclass(frozen=True)
class RunOptions:
    """
    Per-call execution options.

    Parameters
    ----------
    retryable : bool
        The call may be retried on failure (default: False)
    show_stderr : bool
        Return stdout and stderr separately as a :class:`CommandOutput`
        instead of stdout only (default: False)
    timeout : float, optional
        Total seconds the call may take, retries included. The running tool
        is killed and :class:`CommandTimeoutError` raised once it is spent.
    """

    retryable: bool = False
    show_stderr: bool = False
    timeout: float | None = None


@dataclass(frozen=True)
class CommandOutput:
    """Separate stdout and stderr of a finished command."""

    stdout: str
    stderr: str


class Executor(Protocol):
    """Interface of the execution collaborator used by the driver."""

    def run(
        self, command: str, *args: str, options: RunOptions | None = None
    ) -> str | CommandOutput:
        """
        Run an lxc tool.

        Args:
            command: Tool name without prefix (e.g. ``"info"`` for ``lxc-info``)
            *args: Command line arguments
            options: Execution options

        Returns:
            Stdout text, or a CommandOutput when ``options.show_stderr`` is set

        Raises:
            ExecuteError: If the tool exits with a non-zero status
            CommandTimeoutError: If the tool outlives ``options.timeout``
        """
        ...


class SudoWrapper:
    """
    Executor running lxc tools with elevated privileges.

    Parameters
    ----------
    wrapper_path : str, optional
        Script placed between ``sudo`` and the tool (e.g. a sudoers-whitelisted
        wrapper). Omitted when None.
    use_sudo : bool
        Prefix commands with ``sudo`` (default: True)
    command_prefix : str
        Prefix prepended to tool names (default: ``"lxc-"``)
    retry_attempts : int
        Total attempts for retryable calls (default: 3)
    retry_interval : float
        Seconds to wait between attempts (default: 1.0)
    command_timeout : float, optional
        Upper bound in seconds for a single tool run. Unbounded when None.

    Examples
    --------
    >>> wrapper = SudoWrapper(use_sudo=False)
    >>> wrapper.build_command("info", "--name", "web")
    ['lxc-info', '--name', 'web']
    """

    def __init__(
        self,
        wrapper_path: str | None = None,
        use_sudo: bool = True,
        command_prefix: str = "lxc-",
        retry_attempts: int = 3,
        retry_interval: float = 1.0,
        command_timeout: float | None = None,
    ) -> None:
        self.wrapper_path = wrapper_path
        self.use_sudo = use_sudo
        self.command_prefix = command_prefix
        self.retry_attempts = max(1, retry_attempts)
        self.retry_interval = retry_interval
        self.command_timeout = command_timeout

    def build_command(self, command: str, *args: str) -> list[str]:
        """Build the full argv for a tool invocation."""
        argv: list[str] = []
        if self.use_sudo:
            argv.append("sudo")
        if self.wrapper_path:
            argv.append(self.wrapper_path)
        argv.append(f"{self.command_prefix}{command}")
        argv.extend(args)
        return argv

    def run(
        self, command: str, *args: str, options: RunOptions | None = None
    ) -> str | CommandOutput:
        """Run an lxc tool, retrying when the call is marked retryable."""
        options = options or RunOptions()
        argv = self.build_command(command, *args)
        attempts = self.retry_attempts if options.retryable else 1
        deadline = None if options.timeout is None else time.monotonic() + options.timeout

        attempt = 1
        while True:
            try:
                with _lock:
                    return self._execute(argv, options, self._attempt_timeout(deadline))
            except CommandTimeoutError:
                # timeouts are never retried
                raise
            except ExecuteError as e:
                if attempt >= attempts:
                    raise
                if deadline is not None and time.monotonic() + self.retry_interval >= deadline:
                    logger.debug(f"No time left to retry {argv}")
                    raise
                logger.warning(
                    f"Retryable command {argv} failed "
                    f"(attempt {attempt}/{attempts}): {e.stderr.strip()}"
                )
                attempt += 1
                time.sleep(self.retry_interval)

    def _attempt_timeout(self, deadline: float | None) -> float | None:
        limits = []
        if self.command_timeout is not None:
            limits.append(self.command_timeout)
        if deadline is not None:
            limits.append(max(0.0, deadline - time.monotonic()))
        return min(limits) if limits else None

    def _execute(
        self, argv: list[str], options: RunOptions, timeout: float | None
    ) -> str | CommandOutput:
        logger.debug(f"Running {argv} (timeout: {timeout})")
        try:
            result = subprocess.run(
                argv, capture_output=True, text=True, check=False, timeout=timeout
            )
        except subprocess.TimeoutExpired as e:
            logger.warning(f"Command {argv} timed out after {timeout}s")
            raise CommandTimeoutError(
                argv, e.timeout, _as_text(e.stdout), _as_text(e.stderr)
            ) from e
        except FileNotFoundError as e:
            raise ConfigurationError(
                f"Executable not found: {argv[0]}",
                details={"command": argv, "error": str(e)},
            ) from e

        if result.returncode != 0:
            logger.debug(f"Command {argv} exited with {result.returncode}: {result.stderr}")
            raise ExecuteError(argv, result.returncode, result.stdout, result.stderr)

        if options.show_stderr:
            return CommandOutput(stdout=result.stdout, stderr=result.stderr)
        return result.stdout.replace("\r\n", "\n")


def _as_text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output
