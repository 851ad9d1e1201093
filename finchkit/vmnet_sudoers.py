"""The sudoers file that lets Lima manage vmnet networking without prompting."""

from __future__ import annotations

import os
from dataclasses import dataclass

from finchkit.flog import Logger
from finchkit.lima import CommandCreator, LimaCmdCreator


@dataclass
class SudoersFile:
    """Dependency on the sudoers file matching the output of ``limactl sudoers``.

    ``root`` relocates reads of the file below another directory; ``None``
    means the real filesystem.
    """

    exec_creator: CommandCreator | None = None
    lima_creator: LimaCmdCreator | None = None
    logger: Logger | None = None
    root: str | None = None

    def path(self) -> str:
        """Location of the file; must match the network configuration."""
        return "/etc/sudoers.d/finch-lima"

    def _disk_path(self) -> str:
        if self.root is None:
            return self.path()
        return os.path.join(self.root, self.path().lstrip("/"))

    def installed(self) -> bool:
        """True when the file on disk equals what Lima would generate."""
        try:
            with open(self._disk_path(), "rb") as handle:
                content = handle.read()
        except FileNotFoundError as err:
            self.logger.info("sudoers file not found: %s", err)
            return False
        except OSError as err:
            self.logger.error("failed to read sudoers file: %s", err)
            return False
        try:
            out = self.lima_creator.create_without_stdio("sudoers").output()
        except Exception as err:
            self.logger.error("failed to run lima sudoers command: %s", err)
            return False
        return content == out

    def install(self) -> None:
        """Write Lima's sudoers output to the file through ``sudo tee``."""
        try:
            sudoers = self.lima_creator.create_without_stdio("sudoers").output()
        except Exception as err:
            raise RuntimeError(f"failed to get lima sudoers: {err}") from err
        cmd = self.exec_creator.create("sudo", "tee", self.path())
        cmd.set_stdin(sudoers)
        try:
            # output() rather than a bare run so that failures carry stderr.
            cmd.output()
        except Exception as err:
            raise RuntimeError(f"failed to write to the sudoers file: {err}") from err

    def requires_root(self) -> bool:
        """Writing below /etc/sudoers.d needs root."""
        return True