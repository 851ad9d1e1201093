"""Paths, data disk, vmnet dependencies, support bundles and SSH config for a Lima-based VM."""

__version__ = "0.1.0"