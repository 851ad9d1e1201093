"""Creation of support bundles: a zip of platform data and redacted logs and configs."""

from __future__ import annotations

import getpass
import os
import posixpath
import re
import zipfile
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Protocol, Sequence

import yaml

from finchkit.flog import Logger
from finchkit.lima import CommandCreator
from finchkit.paths import FinchPath
from finchkit.redact import (
    redact_finch_install,
    redact_network_addresses,
    redact_ports,
    redact_ssh_keys,
    redact_username,
)

# Filled in by the release build.
VERSION = ""
GIT_COMMIT = ""

_BUNDLE_PREFIX = "finch-support"
_PLATFORM_FILE_NAME = "platform.yaml"
_LOG_PREFIX = "logs"
_CONFIG_PREFIX = "configs"
_ADDITIONAL_PREFIX = "misc"


@dataclass
class PlatformData:
    """Platform facts written to ``platform.yaml`` inside the bundle."""

    os: str = ""
    arch: str = ""
    finch: str = ""


class _FileLists(Protocol):
    def log_files(self) -> list[str]:
        """Log files to include."""

    def config_files(self) -> list[str]:
        """Configuration files to include."""


def _split_lines(text: str) -> list[str]:
    """Split into lines that keep their trailing newline; the last may lack one."""
    parts = text.split("\n")
    return [part + "\n" for part in parts[:-1]] + [parts[-1]]


class BundleBuilder:
    """Builds support bundles for an installation."""

    def __init__(
        self,
        logger: Logger,
        config: _FileLists,
        finch: FinchPath,
        ecc: CommandCreator,
        output_dir: str = ".",
    ) -> None:
        self._logger = logger
        self._config = config
        self._finch = finch
        self._ecc = ecc
        self._output_dir = output_dir

    def generate_support_bundle(
        self, additional_files: Sequence[str], exclude_files: Sequence[str]
    ) -> str:
        """Write a new bundle and return its path."""
        zip_name = bundle_file_name()
        self._logger.debug("Creating %s...", zip_name)
        zip_path = os.path.join(self._output_dir, zip_name)
        zip_prefix = posixpath.splitext(zip_name)[0]

        with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(f"{zip_prefix}/", b"")

            platform = self._platform_data()
            self._logger.debug("Gathering platform data...")
            write_platform_data(archive, platform, zip_prefix)

            self._logger.debug("Copying in log files...")
            for file in self._config.log_files():
                if file_should_be_excluded(file, exclude_files):
                    self._logger.info("Excluding %s...", file)
                    continue
                try:
                    self._copy_in_file(archive, file, posixpath.join(zip_prefix, _LOG_PREFIX))
                except (OSError, re.error, KeyError) as err:
                    self._logger.warning('Could not copy in "%s". Error: %s', file, err)

            self._logger.debug("Copying in config files...")
            for file in self._config.config_files():
                if file_should_be_excluded(file, exclude_files):
                    self._logger.info("Excluding %s...", file)
                    continue
                try:
                    self._copy_in_file(archive, file, posixpath.join(zip_prefix, _CONFIG_PREFIX))
                except (OSError, re.error, KeyError) as err:
                    self._logger.warning('Could not copy in "%s". Error: %s', file, err)

            self._logger.debug("Copying in additional files...")
            for file in additional_files:
                if file_should_be_excluded(file, exclude_files):
                    self._logger.info("Excluding %s...", file)
                    continue
                try:
                    self._copy_in_file(
                        archive, file, posixpath.join(zip_prefix, _ADDITIONAL_PREFIX)
                    )
                except (OSError, re.error, KeyError) as err:
                    self._logger.warning(
                        "Could not add additional file %s. Error: %s", file, err
                    )

        return zip_path

    def _copy_in_file(self, archive: zipfile.ZipFile, file_name: str, prefix: str) -> None:
        with open(file_name, "rb") as handle:
            data = handle.read()
        self._logger.debug("Copying %s...", file_name)

        username = getpass.getuser()
        redacted = []
        for line in _split_lines(data.decode("utf-8", errors="replace")):
            line = redact_finch_install(line, self._finch)
            line = redact_username(line, username)
            line = redact_network_addresses(line)
            line = redact_ports(line)
            line = redact_ssh_keys(line)
            redacted.append(line)

        base_name = posixpath.basename(file_name)
        archive.writestr(posixpath.join(prefix, base_name), "".join(redacted).encode("utf-8"))

    def _platform_data(self) -> PlatformData:
        return PlatformData(
            os=self._run_and_trim("sw_vers", "-productVersion"),
            arch=self._run_and_trim("uname", "-m"),
            finch=VERSION,
        )

    def _run_and_trim(self, name: str, *args: str) -> str:
        out = self._ecc.create(name, *args).output()
        return out.decode().removesuffix("\n")


def write_platform_data(archive: zipfile.ZipFile, platform: PlatformData, prefix: str) -> None:
    """Add the platform data as YAML under ``prefix`` in the archive."""
    content = yaml.safe_dump(asdict(platform), sort_keys=False)
    archive.writestr(posixpath.join(prefix, _PLATFORM_FILE_NAME), content.encode("utf-8"))


def bundle_file_name() -> str:
    """Name for a new bundle, stamped with the current local time."""
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    return f"{_BUNDLE_PREFIX}-{timestamp}.zip"


def file_should_be_excluded(filename: str, exclude: Sequence[str]) -> bool:
    """True if the file matches an entry by absolute path or by base name."""
    file_abs = os.path.abspath(filename)
    base = posixpath.basename(filename)
    for exclude_file in exclude:
        if file_abs == os.path.abspath(exclude_file):
            return True
        if base == exclude_file:
            return True
    return False