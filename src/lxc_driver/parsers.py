"""Parsing of lxc tool output into typed values."""

import logging
import re

from .commands import NAMESPACES_FLAG
from .exceptions import OutputParseError, StateParseError
from .models import ContainerState

logger = logging.getLogger(__name__)

# the value must sit on the label's own line
_STATE_LINE = re.compile(r"^[ \t]*state:[ \t]*(\S+)", re.IGNORECASE | re.MULTILINE)
_VERSION_LABEL = re.compile(r"^lxc version:\s*", re.IGNORECASE)


def parse_list(raw: str) -> list[str]:
    """
    Parse lxc-ls output into container names.

    Names may be separated by spaces or newlines. Duplicates are dropped,
    keeping the first occurrence.

    Examples
    --------
    >>> parse_list("dup-container\\na-container dup-container")
    ['dup-container', 'a-container']
    """
    return list(dict.fromkeys(raw.split()))


def parse_version(raw: str) -> str:
    """Extract the version string from ``lxc-create --version`` output."""
    lines = raw.strip().splitlines()
    if not lines:
        raise OutputParseError("Unable to parse lxc version", output=raw)
    return _VERSION_LABEL.sub("", lines[0]).strip()


def parse_config(raw: str) -> str:
    """Parse an lxc-config value. The result never ends with a newline."""
    return raw.replace("\n", "").rstrip()


def parse_state(raw: str) -> ContainerState:
    """
    Parse lxc-info output into a container state.

    Only the ``state:`` line is considered; label and value are matched
    case-insensitively.

    Args:
        raw: lxc-info output

    Returns:
        The container state, ``ContainerState.UNKNOWN`` for unlisted values

    Raises:
        StateParseError: If there is no state line
    """
    match = _STATE_LINE.search(raw)
    if match is None:
        raise StateParseError("No state found in lxc-info output", output=raw)

    value = match.group(1).lower()
    try:
        return ContainerState(value)
    except ValueError:
        logger.debug(f"Unrecognized container state '{value}', reporting as unknown")
        return ContainerState.UNKNOWN


def parse_supports_namespaces(help_text: str) -> bool:
    """Tell whether lxc-attach help output advertises ``--namespaces``."""
    return NAMESPACES_FLAG in help_text
