"""Dependencies that make Lima's managed vmnet networking and port forwarding work."""

from __future__ import annotations

from dataclasses import dataclass

import yaml

from finchkit.dependency import Dependency, Group
from finchkit.flog import Logger
from finchkit.lima import CommandCreator, LimaCmdCreator
from finchkit.paths import FinchPath
from finchkit.vmnet_binaries import Binaries
from finchkit.vmnet_sudoers import SudoersFile

_DESCRIPTION = "Requesting root access to finish network dependency configuration"
_ERR_MSG = (
    "Failed to finish installing rootful dependencies"
    " which are needed for external network access within the guest OS."
    " Boot will continue, but container exposed ports will not be accessible from macOS."
)

# Sets up the managed network "finch-shared"; must match the networks configuration.
_NETWORK_CONFIG = "networks:\n  - lima: finch-shared\n"


def _parse_networks(raw: bytes) -> list[dict[str, str]]:
    """Read the ``networks`` list of a Lima YAML document, checking its shape."""
    data = yaml.safe_load(raw)
    if data is None:
        return []
    if not isinstance(data, dict):
        raise ValueError(f"cannot read {type(data).__name__} value as a configuration mapping")
    networks = data.get("networks")
    if networks is None:
        return []
    if not isinstance(networks, list) or not all(isinstance(n, dict) for n in networks):
        raise ValueError("networks must be a list of mappings")
    return networks


@dataclass
class OverrideLimaConfig:
    """Adds the network section to Lima's override config once its prerequisites exist."""

    finch: FinchPath
    binaries: Dependency | None = None
    sudoers_file: Dependency | None = None
    logger: Logger | None = None

    def verify_config_has_network_section(self, file_path: str) -> bool:
        """True if the file defines exactly the one expected network."""
        try:
            with open(file_path, "rb") as handle:
                raw = handle.read()
        except FileNotFoundError as err:
            self.logger.debug("config file not found: %s", err)
            return False
        except OSError as err:
            self.logger.error("failed to read config file: %s", err)
            return False
        try:
            networks = _parse_networks(raw)
        except (yaml.YAMLError, ValueError) as err:
            self.logger.error("failed to unmarshal YAML from override config file: %s", err)
            return False
        if len(networks) != 1:
            self.logger.error(
                "override config file has incorrect number of Networks defined (%d)",
                len(networks),
            )
            return False
        return networks[0].get("lima") == "finch-shared"

    def append_network_configuration(self, file_path: str) -> None:
        """Append the network section, creating the file if needed."""
        try:
            handle = open(file_path, "a", encoding="utf-8")
        except OSError as err:
            raise OSError(f"error opening file at path {file_path}, error: {err}") from err
        with handle:
            try:
                handle.write(_NETWORK_CONFIG)
            except OSError as err:
                raise OSError(f"error writing to file at path {file_path}") from err

    def should_add_networks_config(self) -> bool:
        """Only with binaries and sudoers in place does the network section work."""
        return self.binaries.installed() and self.sudoers_file.installed()

    def installed(self) -> bool:
        return self.verify_config_has_network_section(self.finch.lima_override_config_path())

    def install(self) -> None:
        if not self.should_add_networks_config():
            raise RuntimeError(
                "skipping installation of network configuration because pre-requisites are missing"
            )
        self.append_network_configuration(self.finch.lima_override_config_path())

    def requires_root(self) -> bool:
        return False


def new_deps(
    exec_creator: CommandCreator | None,
    lima_creator: LimaCmdCreator | None,
    finch: FinchPath,
    logger: Logger | None,
    root: str | None = None,
) -> list[Dependency]:
    """The network dependencies, in the order they must be installed."""
    binaries = Binaries(finch, exec_creator, logger, root)
    sudoers_file = SudoersFile(exec_creator, lima_creator, logger, root)
    override = OverrideLimaConfig(finch, binaries, sudoers_file, logger)
    # The override config checks the other two itself, because a group keeps
    # installing after a failure and a network section without them breaks networking.
    return [binaries, sudoers_file, override]


def new_dependency_group(
    exec_creator: CommandCreator | None,
    lima_creator: LimaCmdCreator | None,
    finch: FinchPath,
    logger: Logger | None,
    root: str | None = None,
) -> Group:
    """Group of everything vmnet networking needs."""
    return Group(new_deps(exec_creator, lima_creator, finch, logger, root), _DESCRIPTION, _ERR_MSG)