"""LXC driver: container lifecycle through the lxc command line tools."""

from .config import DriverSettings, load_config
from .driver import LXCDriver
from .exceptions import (
    CommandTimeoutError,
    ConfigurationError,
    ContainerAlreadyExists,
    ContainerError,
    ExecuteError,
    LXCDriverError,
    OutputParseError,
    StateParseError,
    TransitionBlockNotProvided,
    TransitionError,
    TransitionTimeout,
)
from .executor import CommandOutput, Executor, RunOptions, SudoWrapper
from .models import ContainerState

__all__ = [
    # Driver
    "LXCDriver",
    "ContainerState",
    # Execution
    "Executor",
    "SudoWrapper",
    "RunOptions",
    "CommandOutput",
    # Config
    "DriverSettings",
    "load_config",
    # Errors
    "LXCDriverError",
    "ExecuteError",
    "CommandTimeoutError",
    "ContainerError",
    "ContainerAlreadyExists",
    "TransitionError",
    "TransitionBlockNotProvided",
    "TransitionTimeout",
    "OutputParseError",
    "StateParseError",
    "ConfigurationError",
]
