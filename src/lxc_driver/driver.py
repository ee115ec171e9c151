"""LXC driver: container lifecycle through the lxc command line tools."""

import logging
import time
from collections.abc import Callable, Generator, Iterable, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

from . import commands
from .commands import Command
from .config import DriverSettings
from .exceptions import (
    CommandTimeoutError,
    ConfigurationError,
    ExecuteError,
    TransitionBlockNotProvided,
    TransitionTimeout,
)
from .executor import CommandOutput, Executor, SudoWrapper
from .models import ContainerState
from .parsers import (
    parse_config,
    parse_list,
    parse_state,
    parse_supports_namespaces,
    parse_version,
)
from .translator import translate_error

logger = logging.getLogger(__name__)

TransitionCallback = Callable[["LXCDriver"], Any]


class LXCDriver:
    """
    Driver for a single LXC container, or for the host when no name is bound.

    Builds lxc tool invocations, runs them through an executor and turns
    their output and failures into typed results and errors. The driver keeps
    no state of its own: every call queries the live system.

    Parameters
    ----------
    executor : Executor
        Runs the lxc tools (usually a :class:`SudoWrapper`)
    name : str, optional
        Container name. Required by container-level operations.
    transition_timeout : float
        Default ceiling in seconds for :meth:`transition_to`
    poll_interval : float
        Default delay in seconds between state queries in :meth:`transition_to`

    Examples
    --------
    >>> driver = LXCDriver(SudoWrapper(), "web")
    >>> driver.transition_to("running", lambda d: d.start())
    <ContainerState.RUNNING: 'running'>
    """

    def __init__(
        self,
        executor: Executor,
        name: str | None = None,
        *,
        transition_timeout: float = 60.0,
        poll_interval: float = 1.0,
    ) -> None:
        self.executor = executor
        self._name = name
        self.transition_timeout = transition_timeout
        self.poll_interval = poll_interval

    @classmethod
    def from_settings(
        cls, settings: DriverSettings | None = None, name: str | None = None
    ) -> "LXCDriver":
        """Create a driver backed by a SudoWrapper configured from settings."""
        settings = settings or DriverSettings()
        executor = SudoWrapper(
            wrapper_path=settings.sudo_wrapper_path,
            use_sudo=settings.use_sudo,
            command_prefix=settings.command_prefix,
            retry_attempts=settings.retry_attempts,
            retry_interval=settings.retry_interval_seconds,
            command_timeout=settings.command_timeout_seconds,
        )
        return cls(
            executor,
            name,
            transition_timeout=settings.transition_timeout_seconds,
            poll_interval=settings.poll_interval_seconds,
        )

    @property
    def name(self) -> str | None:
        """Bound container name, if any."""
        return self._name

    def _require_name(self, operation: str) -> str:
        if self._name is None:
            raise ConfigurationError(
                f"Cannot {operation}: no container name bound to the driver",
                details={"operation": operation},
            )
        return self._name

    def _run(self, command: Command) -> str | CommandOutput:
        logger.debug(f"lxc-{command.tool} {' '.join(command.args)}")
        with self.handle_errors(command.tool):
            return self.executor.run(command.tool, *command.args, options=command.options)

    @contextmanager
    def handle_errors(self, command: str) -> Generator[None, None, None]:
        """
        Context manager translating raw tool failures into semantic errors.

        Args:
            command: Tool name without prefix (e.g. ``"create"``)

        Yields:
            None

        Example:
            with driver.handle_errors("create"):
                executor.run("create", ...)
        """
        try:
            yield
        except ExecuteError as e:
            translated = translate_error(command, e, self._name)
            if translated is None:
                raise
            logger.debug(f"lxc-{command} failure translated to {type(translated).__name__}")
            raise translated from e

    # Host-level operations

    def list_containers(self) -> list[str]:
        """
        List containers known to lxc.

        Returns:
            Container names, without duplicates
        """
        return parse_list(self._run(commands.list_containers()))

    def version(self) -> str:
        """Get the installed lxc version."""
        return parse_version(self._run(commands.version()))

    def config(self, key: str) -> str:
        """
        Read an lxc configuration value.

        Args:
            key: Config key (e.g. ``"lxc.lxcpath"``)

        Returns:
            The value, without trailing newline
        """
        return parse_config(self._run(commands.config(key)))

    # Container-level operations

    def update_config(self, path: str) -> None:
        """Upgrade a container config file to the current lxc format."""
        self._run(commands.update_config(path))

    def create(
        self,
        template: str,
        backingstore: str,
        backingstore_opts: Iterable[Sequence[str]] = (),
        config_file: str | None = None,
        template_args: Mapping[str, str] | None = None,
    ) -> None:
        """
        Create the container.

        Args:
            template: Template name
            backingstore: Backing store type
            backingstore_opts: Ordered flag/value pairs for the backing store
            config_file: Container config file
            template_args: Flags passed through to the template

        Raises:
            ContainerAlreadyExists: If a container with this name exists
            ExecuteError: If lxc-create fails for any other reason
        """
        name = self._require_name("create")
        self._run(
            commands.create(
                name, template, backingstore, backingstore_opts, config_file, template_args
            )
        )
        logger.info(f"Created container: {name}")

    def destroy(self) -> None:
        """Destroy the container."""
        name = self._require_name("destroy")
        self._run(commands.destroy(name))
        logger.info(f"Destroyed container: {name}")

    def start(self, options: Iterable[str] = ()) -> None:
        """Start the container in the background."""
        self._run(commands.start(self._require_name("start"), options))

    def stop(self) -> None:
        """Stop the container."""
        self._run(commands.stop(self._require_name("stop")))

    def info(self, *extra: str) -> str:
        """Get raw lxc-info output for the container."""
        return self._run(commands.info(self._require_name("info"), *extra))

    def state(self, timeout: float | None = None) -> ContainerState:
        """
        Get the current container state.

        Args:
            timeout: Seconds the lxc-info query may take, retries included

        Raises:
            StateParseError: If lxc-info output has no state line
            CommandTimeoutError: If lxc-info does not answer in time
        """
        name = self._require_name("info")
        return parse_state(self._run(commands.info(name, timeout=timeout)))

    def supports_namespaces(self) -> bool:
        """Probe whether the installed lxc-attach accepts ``--namespaces``."""
        output = self._run(commands.attach_help())
        if isinstance(output, CommandOutput):
            return parse_supports_namespaces(output.stderr + output.stdout)
        return parse_supports_namespaces(output)

    def supports_attach(self) -> bool:
        """Check whether commands can be attached to the container."""
        try:
            self._run(commands.attach(self._require_name("attach"), ["/bin/true"]))
        except ExecuteError:
            return False
        return True

    def attach(
        self, *command: str, namespaces: Iterable[str] | str | None = None
    ) -> str:
        """
        Run a command inside the container.

        Args:
            *command: Command and arguments
            namespaces: Namespace or namespaces to share with the host
                (e.g. ``"network"`` or ``["network", "mount"]``).
                Ignored when the installed lxc-attach lacks ``--namespaces``.

        Returns:
            Command output
        """
        name = self._require_name("attach")
        namespaces = commands.normalize_namespaces(namespaces)
        if namespaces and not self.supports_namespaces():
            logger.warning("lxc-attach does not support --namespaces, ignoring namespaces")
            namespaces = []
        return self._run(commands.attach(name, command, namespaces))

    def transition_to(
        self,
        target_state: ContainerState | str,
        callback: TransitionCallback | None = None,
        *,
        timeout: float | None = None,
        poll_interval: float | None = None,
    ) -> ContainerState:
        """
        Perform a state change and wait until it is observable.

        The callback receives the driver and issues whatever command leads to
        ``target_state``. The container state is then polled until it matches.

        Args:
            target_state: State to wait for
            callback: Called exactly once with this driver
            timeout: Ceiling in seconds on the total wait (default: driver's)
            poll_interval: Delay in seconds between state queries

        Returns:
            The reached state

        Raises:
            TransitionBlockNotProvided: If no callback is given
            TransitionTimeout: If the state is not reached in time
        """
        if callback is None:
            raise TransitionBlockNotProvided(str(target_state))
        name = self._require_name("transition")
        target = ContainerState(str(target_state).lower())
        timeout = self.transition_timeout if timeout is None else timeout
        poll_interval = self.poll_interval if poll_interval is None else poll_interval

        callback(self)

        deadline = time.monotonic() + timeout
        last_state: ContainerState | None = None
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise TransitionTimeout(
                    name, target.value, last_state.value if last_state else None, timeout
                )

            try:
                last_state = self.state(timeout=remaining)
            except CommandTimeoutError as e:
                raise TransitionTimeout(
                    name, target.value, last_state.value if last_state else None, timeout
                ) from e

            if last_state == target:
                logger.info(f"Container {name} reached state '{target}'")
                return last_state

            logger.debug(f"Target state '{target}' not reached, currently on '{last_state}'")
            remaining = deadline - time.monotonic()
            if remaining > 0:
                time.sleep(min(poll_interval, remaining))

    list = list_containers
