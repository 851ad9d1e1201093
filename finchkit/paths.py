"""Paths calculated relative to the Finch installation directory."""

from __future__ import annotations

import hashlib
from typing import Protocol


class FinchPath(str):
    """The Finch installation root, with helpers for the paths beneath it."""

    __slots__ = ()

    def config_file_path(self, home_dir: str) -> str:
        return f"{home_dir}/.finch/finch.yaml"

    def user_data_disk_path(self, home_dir: str) -> str:
        """Permanent storage location of the user data disk."""
        return f"{home_dir}/.finch/.disks/{self.path_sum()}"

    def lima_home_path(self) -> str:
        return f"{self}/lima/data"

    def lima_instance_path(self) -> str:
        return f"{self}/lima/data/finch"

    def limactl_path(self) -> str:
        return f"{self}/lima/bin/limactl"

    def qemu_bin_dir(self) -> str:
        """Directory holding the pinned binaries QEMU depends on."""
        return f"{self}/lima/bin"

    def base_yaml_file_path(self) -> str:
        return f"{self}/os/finch.yaml"

    def lima_config_directory_path(self) -> str:
        return f"{self}/lima/data/_config"

    def lima_override_config_path(self) -> str:
        return f"{self}/lima/data/_config/override.yaml"

    def lima_ssh_private_key_path(self) -> str:
        return f"{self}/lima/data/_config/user"

    def path_sum(self) -> str:
        """Hex of the first 8 bytes of the SHA-256 of the Lima instance path."""
        digest = hashlib.sha256(self.lima_instance_path().encode()).digest()
        return digest[:8].hex()


class FinchFinderDeps(Protocol):
    """System queries needed to locate the installation."""

    def executable(self) -> str:
        """Path of the running program."""

    def eval_symlinks(self, path: str) -> str:
        """Path with symbolic links resolved."""

    def file_path_join(self, *args: str) -> str:
        """Cleaned join of the path elements."""


class FinchNotFoundError(Exception):
    """The installation directory could not be determined."""


def find_finch(deps: FinchFinderDeps) -> FinchPath:
    """Locate the installation root from the running executable (root/bin/finch)."""
    try:
        exe = deps.executable()
    except OSError as err:
        raise FinchNotFoundError(
            f"failed to locate the executable that starts this process: {err}"
        ) from err
    try:
        real_path = deps.eval_symlinks(exe)
    except OSError as err:
        raise FinchNotFoundError(
            f"failed to find the real path of the executable: {err}"
        ) from err
    return FinchPath(deps.file_path_join(real_path, "../../"))