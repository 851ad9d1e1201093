"""Management of the persistent disk that holds containerd user data."""

from __future__ import annotations

import json
import os
import posixpath
from dataclasses import dataclass

from finchkit.lima import CommandCreator, LimaCmdCreator
from finchkit.paths import FinchPath

# Must stay consistent with the additionalDisks entry of the VM template.
_DISK_NAME = "finch"
_DISK_SIZE = "50G"


class DiskError(Exception):
    """The user data disk could not be inspected, created or attached."""


@dataclass(frozen=True)
class QemuDiskInfo:
    """The parts of ``qemu-img info --output=json`` this package reads."""

    virtual_size: int = 0
    filename: str = ""
    format: str = ""
    actual_size: int = 0
    dirty_flag: bool = False


def _parse_disk_info(raw: bytes) -> QemuDiskInfo:
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("disk info is not a JSON object")
    return QemuDiskInfo(
        virtual_size=int(data.get("virtual-size", 0)),
        filename=str(data.get("filename", "")),
        format=str(data.get("format", "")),
        actual_size=int(data.get("actual-size", 0)),
        dirty_flag=bool(data.get("dirty-flag", False)),
    )


def _command_logs(err: BaseException) -> str:
    output = getattr(err, "output", None)
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    if isinstance(output, str):
        return output
    return str(err)


def _readlink_if_possible(path: str) -> str:
    """Target of the link at ``path``, or an empty string if it is not a link."""
    if os.path.islink(path):
        return os.readlink(path)
    return ""


class UserDataDiskManager:
    """Checks the user data disk configuration and repairs or creates it as needed."""

    def __init__(
        self,
        lcc: LimaCmdCreator,
        ecc: CommandCreator,
        finch: FinchPath,
        home_dir: str,
        vm_type: str | None = None,
    ) -> None:
        self._lcc = lcc
        self._ecc = ecc
        self._finch = finch
        self._home_dir = home_dir
        self._vm_type = vm_type

    @property
    def _disk_path(self) -> str:
        return self._finch.user_data_disk_path(self._home_dir)

    @property
    def _lima_disk_dir(self) -> str:
        return posixpath.join(self._finch.lima_home_path(), "_disks", _DISK_NAME)

    @property
    def _lima_path(self) -> str:
        return f"{self._finch.lima_home_path()}/_disks/{_DISK_NAME}/datadisk"

    @property
    def _qemu_img(self) -> str:
        return posixpath.join(self._finch.qemu_bin_dir(), "qemu-img")

    def ensure_user_data_disk(self) -> None:
        """Make sure the Lima data disk exists and points at the persistent disk."""
        if self._lima_disk_exists():
            disk_path = self._disk_path
            if self._vm_type == "vz":
                info = self._disk_info(disk_path)
                # Convert before Lima starts: Lima would write the RAW file into its
                # own directory instead of following the link to the persistent disk.
                if info.format != "raw":
                    self._convert_to_raw(disk_path)
                    self._attach_persistent_disk()
            if _readlink_if_possible(self._lima_path) != disk_path:
                self._attach_persistent_disk()
        else:
            self._create_lima_disk()
            self._attach_persistent_disk()

        if self._lima_disk_is_locked():
            self._unlock_lima_disk()

    def _persistent_disk_exists(self) -> bool:
        return os.path.exists(self._disk_path)

    def _lima_disk_exists(self) -> bool:
        cmd = self._lcc.create_without_stdio("disk", "ls", _DISK_NAME, "--json")
        try:
            out = cmd.output()
        except Exception:
            return False
        try:
            listing = json.loads(out)
        except ValueError:
            return False
        return isinstance(listing, dict) and listing.get("name") == _DISK_NAME

    def _disk_info(self, disk_path: str) -> QemuDiskInfo:
        cmd = self._ecc.create(self._qemu_img, "info", "--output=json", disk_path)
        try:
            out = cmd.combined_output()
        except Exception as err:
            raise DiskError(f'failed to get disk info for disk at "{disk_path}": {err}') from err
        try:
            return _parse_disk_info(out)
        except (ValueError, TypeError) as err:
            raise DiskError(
                f'failed to unmarshal disk info JSON for disk at "{disk_path}": {err}'
            ) from err

    def _convert_to_raw(self, disk_path: str) -> None:
        qcow_path = f"{disk_path}.qcow2"
        try:
            os.rename(disk_path, qcow_path)
        except OSError as err:
            raise DiskError(f"failed to rename disk: {err}") from err
        cmd = self._ecc.create(
            self._qemu_img, "convert", "-f", "qcow2", "-O", "raw", qcow_path, disk_path
        )
        try:
            cmd.combined_output()
        except Exception as err:
            raise DiskError(
                f'failed to convert disk "{disk_path}" from qcow2 to raw: {err}'
            ) from err

    def _create_lima_disk(self) -> None:
        cmd = self._lcc.create_without_stdio(
            "disk", "create", _DISK_NAME, "--size", _DISK_SIZE, "--format", "raw"
        )
        try:
            cmd.combined_output()
        except Exception as err:
            raise DiskError(f"failed to create disk, debug logs:\n{_command_logs(err)}") from err

    def _attach_persistent_disk(self) -> None:
        lima_path = self._lima_path
        disk_path = self._disk_path
        if not self._persistent_disk_exists():
            disks_dir = posixpath.dirname(disk_path)
            if not os.path.exists(disks_dir):
                try:
                    os.makedirs(disks_dir, 0o755, exist_ok=True)
                except OSError as err:
                    raise DiskError(f"could not create persistent disk directory: {err}") from err
            try:
                os.rename(lima_path, disk_path)
            except OSError as err:
                raise DiskError(f"could not move data disk to persistent path: {err}") from err

        # An existing entry would make the link creation fail, so clear it first.
        if os.path.lexists(lima_path):
            os.remove(lima_path)
        os.symlink(disk_path, lima_path)

    def _lima_disk_is_locked(self) -> bool:
        return os.path.exists(posixpath.join(self._lima_disk_dir, "in_use_by"))

    def _unlock_lima_disk(self) -> None:
        cmd = self._lcc.create_without_stdio("disk", "unlock", _DISK_NAME)
        try:
            cmd.combined_output()
        except Exception as err:
            raise DiskError(f"failed to unlock disk, debug logs:\n{_command_logs(err)}") from err