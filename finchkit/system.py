"""Thin access to operating-system facts, injectable for testing."""

from __future__ import annotations

import os
import platform
import posixpath
import sys
from pathlib import Path
from typing import TextIO

_ARCH_NAMES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
}


class StdLib:
    """Real implementations of the system queries the package relies on."""

    def eval_symlinks(self, path: str) -> str:
        """Return the path with every symbolic link resolved; the path must exist."""
        return str(Path(path).resolve(strict=True))

    def file_path_join(self, *args: str) -> str:
        """Join path elements with '/' and clean the result; empty elements are skipped."""
        elems = [a for a in args if a]
        if not elems:
            return ""
        joined = posixpath.normpath("/".join(elems))
        if joined.startswith("//"):
            joined = "/" + joined.lstrip("/")
        return joined

    def executable(self) -> str:
        """Return the absolute path of the program that started this process."""
        program = sys.argv[0] if sys.argv else ""
        if not program:
            raise OSError("cannot determine the executable path")
        return os.path.abspath(program)

    def environ(self) -> list[str]:
        return [f"{key}={value}" for key, value in os.environ.items()]

    def env(self, key: str) -> str:
        return os.environ.get(key, "")

    def lookup_env(self, key: str) -> str | None:
        """Return the variable's value, or None when it is not set."""
        return os.environ.get(key)

    def stdin(self) -> TextIO:
        return sys.stdin

    def stdout(self) -> TextIO:
        return sys.stdout

    def stderr(self) -> TextIO:
        return sys.stderr

    def num_cpu(self) -> int:
        return os.cpu_count() or 1

    def arch(self) -> str:
        machine = platform.machine().lower()
        return _ARCH_NAMES.get(machine, machine)

    def os(self) -> str:
        if sys.platform.startswith("linux"):
            return "linux"
        if sys.platform == "win32":
            return "windows"
        return sys.platform