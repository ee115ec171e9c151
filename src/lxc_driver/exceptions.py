"""Custom exceptions for the LXC driver."""

from typing import Any


class LXCDriverError(Exception):
    """Base exception for all LXC driver errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ExecuteError(LXCDriverError):
    """
    Raised when an lxc tool exits with a non-zero status.

    Carries the captured output so callers (and the error translator) can
    inspect it without re-running the command.
    """

    def __init__(
        self,
        command: list[str] | tuple[str, ...],
        exitcode: int,
        stdout: str = "",
        stderr: str = "",
    ):
        self.command = list(command)
        self.exitcode = exitcode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"Command {self.command} failed with exit code {exitcode}",
            details={
                "command": self.command,
                "exitcode": exitcode,
                "stdout": stdout,
                "stderr": stderr,
            },
        )


class CommandTimeoutError(ExecuteError):
    """Raised when an lxc tool does not finish within its time limit."""

    def __init__(
        self,
        command: list[str] | tuple[str, ...],
        timeout: float,
        stdout: str = "",
        stderr: str = "",
    ):
        super().__init__(command, -1, stdout, stderr)
        self.timeout = timeout
        self.message = f"Command {self.command} timed out after {timeout}s"
        self.details["timeout"] = timeout
        self.args = (self.message,)


# Container operation errors
class ContainerError(LXCDriverError):
    """Base exception for container-related errors."""

    pass


class ContainerAlreadyExists(ContainerError):
    """Raised when creating a container whose name is already taken."""

    def __init__(self, name: str | None):
        self.name = name
        super().__init__(
            f"Container already exists: {name}",
            details={"name": name},
        )


# State transition errors
class TransitionError(LXCDriverError):
    """Base exception for state transition errors."""

    pass


class TransitionBlockNotProvided(TransitionError):
    """Raised when transition_to is called without a callback."""

    def __init__(self, target_state: str | None = None):
        self.target_state = target_state
        super().__init__(
            "A callback is required to transition a container",
            details={"target_state": target_state},
        )


class TransitionTimeout(TransitionError):
    """Raised when a container does not reach the target state in time."""

    def __init__(
        self,
        name: str | None,
        target_state: str,
        last_state: str | None = None,
        timeout: float | None = None,
    ):
        self.name = name
        self.target_state = target_state
        self.last_state = last_state
        self.timeout = timeout
        super().__init__(
            f"Container '{name}' did not reach state '{target_state}' "
            f"(currently on '{last_state}')",
            details={
                "name": name,
                "target_state": target_state,
                "last_state": last_state,
                "timeout": timeout,
            },
        )


# Output parsing errors
class OutputParseError(LXCDriverError):
    """Raised when tool output cannot be parsed."""

    def __init__(self, message: str, output: str):
        self.output = output
        super().__init__(message, details={"output": output})


class StateParseError(OutputParseError):
    """Raised when lxc-info output has no recognizable state line."""

    pass


# Configuration errors
class ConfigurationError(LXCDriverError):
    """Raised when the driver or its executor is misconfigured."""

    pass
