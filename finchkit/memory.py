"""Memory information about the current system."""

from __future__ import annotations

import psutil


class Memory:
    """Reports system memory; kept as a class so it can be replaced in tests."""

    def total_memory(self) -> int:
        """Total physical memory in bytes."""
        return psutil.virtual_memory().total