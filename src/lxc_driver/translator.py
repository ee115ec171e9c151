"""
Translation of raw tool failures into semantic errors.

Stderr matching is tied to the wording of the installed lxc tools, so all
patterns live here.
"""

import re

from .exceptions import ContainerAlreadyExists, ExecuteError, LXCDriverError

ALREADY_EXISTS_PATTERN = re.compile(r"already exists", re.IGNORECASE)


def translate_error(
    command: str, error: ExecuteError, name: str | None = None
) -> LXCDriverError | None:
    """
    Map a failed tool invocation to a semantic error.

    Args:
        command: Tool name without prefix (e.g. ``"create"``)
        error: The raw execution failure
        name: Container the command targeted

    Returns:
        The semantic error to raise instead, or None to keep the raw failure
    """
    if command == "create" and ALREADY_EXISTS_PATTERN.search(error.stderr or ""):
        return ContainerAlreadyExists(name)
    return None
