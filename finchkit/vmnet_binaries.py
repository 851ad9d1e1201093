"""The socket_vmnet binaries, installed into a root-owned location."""

from __future__ import annotations

import os
from dataclasses import dataclass

from finchkit.flog import Logger
from finchkit.lima import CommandCreator
from finchkit.paths import FinchPath


def _under_root(root: str | None, path: str) -> str:
    """Where ``path`` lives on disk when the filesystem is rooted at ``root``."""
    if root is None:
        return path
    return os.path.join(root, path.lstrip("/"))


@dataclass
class Binaries:
    """Dependency on socket_vmnet being copied from the build output to /opt.

    ``root`` relocates every file lookup below another directory; ``None``
    means the real filesystem. Commands always receive the logical paths.
    """

    finch: FinchPath
    cmd_creator: CommandCreator | None = None
    logger: Logger | None = None
    root: str | None = None

    def installation_path(self) -> str:
        """Installation directory; /opt is owned by root."""
        return "/opt/finch"

    def socket_vmnet_bin_path(self) -> str:
        """Path of the executable relative to the installation directory."""
        return "/bin/socket_vmnet"

    def installation_path_socket_vmnet_exe(self) -> str:
        """Full path of the installed executable."""
        return f"{self.installation_path()}{self.socket_vmnet_bin_path()}"

    def build_artifact_path(self) -> str:
        """Build output directory of socket_vmnet."""
        return f"{self.finch}/dependencies/lima-socket_vmnet"

    def build_artifact_socket_vmnet_exe(self) -> str:
        """Full path of the executable inside the build output."""
        return f"{self.build_artifact_path()}{self.installation_path_socket_vmnet_exe()}"

    def _read(self, path: str, what: str) -> bytes | None:
        try:
            with open(_under_root(self.root, path), "rb") as handle:
                return handle.read()
        except FileNotFoundError as err:
            self.logger.info("%s socket_vmnet file not found: %s", what, err)
        except OSError as err:
            self.logger.error("failed to read %s socket_vmnet file: %s", what, err)
        return None

    def installed(self) -> bool:
        """True when the installed executable matches the one in the build output."""
        try:
            is_dir = os.path.isdir(_under_root(self.root, self.installation_path())) and bool(
                os.stat(_under_root(self.root, self.installation_path()))
            )
        except FileNotFoundError:
            is_dir = False
        except OSError as err:
            self.logger.error("failed to get status of binaries directory: %s", err)
            return False
        if not is_dir:
            self.logger.info("binaries directory doesn't exist")
            return False

        artifact = self._read(self.build_artifact_socket_vmnet_exe(), "dependency")
        if artifact is None:
            return False
        installed = self._read(self.installation_path_socket_vmnet_exe(), "installed")
        if installed is None:
            return False
        return artifact == installed

    def _run(self, message: str, *args: str) -> None:
        try:
            self.cmd_creator.create(*args).output()
        except Exception as err:
            raise RuntimeError(f"{message}, err: {err}") from err

    def install(self) -> None:
        """Create the directory, copy the build output into it and make root its owner."""
        install_dir = self.installation_path()
        self._run(
            f"error creating installation directory {install_dir}",
            "sudo", "mkdir", "-p", install_dir,
        )
        self._run(
            f"error copying files to directory {install_dir}",
            "sudo", "cp", "-rp", f"{self.build_artifact_path()}{install_dir}", "/opt",
        )
        self._run(
            f"error changing owner of directory {install_dir}",
            "sudo", "chown", "root:wheel", install_dir,
        )
        bin_dir = f"{install_dir}/bin"
        self._run(
            f"error changing owner of files in directory {bin_dir}",
            "sudo", "chown", "-R", "root:wheel", bin_dir,
        )

    def requires_root(self) -> bool:
        """Writing below /opt needs root."""
        return True