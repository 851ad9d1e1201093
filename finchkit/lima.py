"""Command interfaces and VM status queries for the Lima virtual machine."""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from finchkit.flog import Logger


class Command(Protocol):
    """A prepared external command. Failures are raised as exceptions."""

    def output(self) -> bytes:
        """Run the command and return its standard output."""

    def combined_output(self) -> bytes:
        """Run the command and return standard output and error together."""

    def set_stdin(self, data: bytes) -> None:
        """Feed the given bytes to the command's standard input."""


class CommandCreator(Protocol):
    """Creates commands for arbitrary executables."""

    def create(self, name: str, *args: str) -> Command:
        """Prepare a command running ``name`` with ``args``."""


class LimaCmdCreator(Protocol):
    """Creates limactl commands."""

    def create_without_stdio(self, *args: str) -> Command:
        """Prepare a limactl command not attached to the terminal."""


class VMStatus(Enum):
    """The statuses the virtual machine can be in."""

    RUNNING = 0
    STOPPED = 1
    NONEXISTENT = 2
    UNKNOWN = 3


class UnrecognizedStatusError(Exception):
    """Lima reported a status this package does not know."""


_STATUSES = {
    "": VMStatus.NONEXISTENT,
    "Running": VMStatus.RUNNING,
    "Stopped": VMStatus.STOPPED,
}


def get_vm_status(creator: LimaCmdCreator, logger: Logger, instance_name: str) -> VMStatus:
    """Ask Lima for the status of ``instance_name``; command failures propagate."""
    cmd = creator.create_without_stdio("ls", "-f", "{{.Status}}", instance_name)
    status = cmd.output().decode().strip()
    logger.debug("Status of virtual machine: %s", status)
    try:
        return _STATUSES[status]
    except KeyError:
        raise UnrecognizedStatusError("unrecognized system status") from None