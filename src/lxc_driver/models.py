"""
Data models for the LXC driver.

Container states as reported by ``lxc-info``. Members compare equal to their
lower-case string value, so ``ContainerState.RUNNING == "running"``.
Values lxc-info reports that are not listed here map to ``UNKNOWN``.
"""

from enum import Enum


class ContainerState(str, Enum):
    """Container state enumeration."""

    STOPPED = "stopped"
    STARTING = "starting"
    STARTED = "started"
    RUNNING = "running"
    STOPPING = "stopping"
    ABORTING = "aborting"
    FREEZING = "freezing"
    FROZEN = "frozen"
    THAWED = "thawed"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value
