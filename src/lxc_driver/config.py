"""
Configuration for the LXC driver.

Uses Pydantic Settings so every option can be set from the environment
(prefixed with ``LXC_DRIVER_``, e.g. ``LXC_DRIVER_USE_SUDO=false``) or from a
``.env`` file.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DriverSettings(BaseSettings):
    """
    LXC driver settings.

    Parameters
    ----------
    use_sudo : bool
        Run lxc tools through sudo
    sudo_wrapper_path : str, optional
        Wrapper script placed between sudo and the lxc tool
    command_prefix : str
        Prefix of the lxc tool executables
    retry_attempts : int
        Attempts for retryable commands (lxc-info)
    retry_interval_seconds : float
        Delay between attempts of a retryable command
    command_timeout_seconds : float, optional
        Ceiling on a single lxc tool run; unbounded when unset
    poll_interval_seconds : float
        Delay between state queries while waiting for a transition
    transition_timeout_seconds : float
        Maximum total wait for a state transition
    log_level : str
        Logging level used by the command line

    Examples
    --------
    >>> settings = DriverSettings()
    >>> settings.command_prefix
    'lxc-'
    >>> settings.transition_timeout_seconds
    60.0
    >>> settings.command_timeout_seconds
    30.0
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="LXC_DRIVER_",
    )

    use_sudo: bool = Field(default=True, description="Run lxc tools through sudo")
    sudo_wrapper_path: str | None = Field(None, description="Sudo wrapper script path")
    command_prefix: str = Field(default="lxc-", description="lxc tool prefix")
    retry_attempts: int = Field(default=3, ge=1, le=10, description="Retryable attempts")
    retry_interval_seconds: float = Field(default=1.0, ge=0, le=60, description="Retry delay (s)")
    command_timeout_seconds: float | None = Field(
        default=30.0,
        gt=0,
        le=3600,
        description="Single command timeout (s)",
    )
    poll_interval_seconds: float = Field(default=1.0, gt=0, le=60, description="State poll (s)")
    transition_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=3600,
        description="Transition timeout (s)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("sudo_wrapper_path")
    @classmethod
    def validate_wrapper_path(cls, v: str | None) -> str | None:
        """Require an absolute wrapper path."""
        if v is not None and not Path(v).is_absolute():
            raise ValueError(f"Sudo wrapper path must be absolute. Got: {v}")
        return v

    @field_validator("transition_timeout_seconds")
    @classmethod
    def validate_transition_timeout(cls, v: float, info: Any) -> float:
        """Ensure timeout is not shorter than the poll interval."""
        if "poll_interval_seconds" in info.data:
            interval = info.data["poll_interval_seconds"]
            if v < interval:
                raise ValueError(
                    f"Transition timeout ({v}s) must be >= poll interval ({interval}s)"
                )
        return v


def load_config(env_file: Path | str | None = None) -> DriverSettings:
    """
    Load driver settings from the environment and an optional .env file.

    Parameters
    ----------
    env_file : Path or str, optional
        Path to .env file (default: .env in current directory)

    Returns
    -------
    DriverSettings
        Loaded settings
    """
    if env_file:
        return DriverSettings(_env_file=str(env_file))
    return DriverSettings()
