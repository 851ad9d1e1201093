"""Which files a support bundle collects."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

from finchkit.paths import FinchPath


@dataclass(frozen=True)
class BundleConfig:
    """Log and configuration files of an installation that go into a support bundle."""

    finch: FinchPath
    home_dir: str

    def log_files(self) -> list[str]:
        instance = self.finch.lima_instance_path()
        return [
            posixpath.join(instance, "ha.stderr.log"),
            posixpath.join(instance, "ha.stdout.log"),
            posixpath.join(instance, "serial.log"),
        ]

    def config_files(self) -> list[str]:
        return [
            posixpath.join(self.finch.lima_instance_path(), "lima.yaml"),
            self.finch.config_file_path(self.home_dir),
        ]