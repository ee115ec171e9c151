"""
Command line construction for lxc tools.

Every function here is pure: it maps structured inputs to the exact ordered
argument vector handed to the executor. Flag order matters to the tools, so
nothing in this module reorders its inputs.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from .executor import RunOptions

NAMESPACES_FLAG = "--namespaces"


@dataclass(frozen=True)
class Command:
    """A tool invocation: tool name, arguments and execution options."""

    tool: str
    args: tuple[str, ...] = ()
    options: RunOptions = field(default_factory=RunOptions)


def flatten(pairs: Iterable[Sequence[str] | str] | Mapping[str, str]) -> list[str]:
    """
    Flatten flag/value pairs into alternating tokens.

    Already flat tokens are kept as they are, so nested and flat input can
    be mixed.

    Examples
    --------
    >>> flatten([("--dir", "/tmp/foo"), ("--foo", "bar")])
    ['--dir', '/tmp/foo', '--foo', 'bar']
    >>> flatten(["--dir", "/tmp/foo"])
    ['--dir', '/tmp/foo']
    >>> flatten({"--release": "jammy"})
    ['--release', 'jammy']
    """
    if isinstance(pairs, Mapping):
        pairs = pairs.items()
    tokens: list[str] = []
    for pair in pairs:
        if isinstance(pair, str):
            tokens.append(pair)
        else:
            tokens.extend(str(token) for token in pair)
    return tokens


def normalize_namespaces(namespaces: Iterable[str] | str | None) -> list[str]:
    """Turn a namespace name or collection of names into a list."""
    if namespaces is None:
        return []
    if isinstance(namespaces, str):
        return [namespaces]
    return list(namespaces)


def join_namespaces(namespaces: Iterable[str] | str) -> str:
    """Upper-case namespace names and join them the way lxc-attach expects."""
    return "|".join(ns.upper() for ns in normalize_namespaces(namespaces))


def list_containers() -> Command:
    return Command("ls")


def version() -> Command:
    # lxc has no dedicated version tool; lxc-create reports it
    return Command("create", ("--version",))


def config(key: str) -> Command:
    return Command("config", (key,))


def update_config(path: str) -> Command:
    return Command("update-config", ("-c", path))


def create(
    name: str,
    template: str,
    backingstore: str,
    backingstore_opts: Iterable[Sequence[str]] = (),
    config_file: str | None = None,
    template_args: Mapping[str, str] | None = None,
) -> Command:
    """
    Build an lxc-create invocation.

    Args:
        name: Container name
        template: Template name (e.g. ``"download"``)
        backingstore: Backing store type (e.g. ``"dir"``, ``"btrfs"``)
        backingstore_opts: Ordered flag/value pairs for the backing store
        config_file: Config file passed with ``-f``; omitted when None
        template_args: Template flags placed after the ``--`` separator;
            the separator is omitted when there are none

    Returns:
        The create command
    """
    args = ["-B", backingstore, "--template", template, "--name", name]
    args.extend(flatten(backingstore_opts))
    if config_file is not None:
        args.extend(["-f", config_file])
    extra = flatten(template_args or {})
    if extra:
        args.append("--")
        args.extend(extra)
    return Command("create", tuple(args))


def destroy(name: str) -> Command:
    return Command("destroy", ("--name", name))


def start(name: str, extra: Iterable[str] = ()) -> Command:
    """Build an lxc-start invocation. Containers always start daemonized."""
    return Command("start", ("-d", "--name", name, *extra))


def stop(name: str) -> Command:
    return Command("stop", ("--name", name))


def info(name: str, *extra: str, timeout: float | None = None) -> Command:
    """Build an lxc-info invocation. Info queries are safe to retry."""
    return Command(
        "info", ("--name", name, *extra), RunOptions(retryable=True, timeout=timeout)
    )


def attach_help() -> Command:
    """Build the lxc-attach help probe. The help text is printed on stderr."""
    return Command("attach", ("-h",), RunOptions(show_stderr=True))


def attach(
    name: str,
    command: Sequence[str],
    namespaces: Iterable[str] | str | None = None,
) -> Command:
    """
    Build an lxc-attach invocation.

    Args:
        name: Container name
        command: Command and arguments to run inside the container
        namespaces: Namespaces to share; only pass them when the installed
            lxc-attach supports ``--namespaces``

    Returns:
        The attach command
    """
    args = ["--name", name]
    namespaces = normalize_namespaces(namespaces)
    if namespaces:
        args.extend([NAMESPACES_FLAG, join_namespaces(namespaces)])
    args.append("--")
    args.extend(command)
    return Command("attach", tuple(args))
