"""Dependencies of the installation and ordered groups that install them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence

from finchkit.flog import Logger


class Dependency(Protocol):
    """Something the program needs: a binary, a package, a file and so on."""

    def requires_root(self) -> bool:
        """Whether installing needs root privileges."""

    def installed(self) -> bool:
        """Whether the dependency is already in place."""

    def install(self) -> None:
        """Install the dependency, raising on failure."""


class DependencyInstallError(Exception):
    """One or more installations failed; ``errors`` holds the individual failures."""

    def __init__(self, message: str, errors: Sequence[BaseException]) -> None:
        self.message = message
        self.errors = list(errors)
        joined = "\n".join(str(e) for e in self.errors)
        super().__init__(f"{message}: {joined}")


@dataclass
class Group:
    """Logically related dependencies, installed in the given order."""

    deps: list[Dependency] = field(default_factory=list)
    desc: str = ""
    err_msg: str = ""

    def install_optional(self, logger: Logger) -> None:
        """Install every missing dependency, raising once with all failures collected."""
        errors: list[Exception] = []
        announced = False
        for dep in self.deps:
            if dep.installed():
                continue
            if dep.requires_root() and not announced:
                announced = True
                logger.info(self.desc)
            try:
                dep.install()
            except Exception as err:  # every failure is collected and reported together
                errors.append(err)
        if errors:
            raise DependencyInstallError(self.err_msg, errors)


def install_optional_deps(groups: Sequence[Group], logger: Logger) -> None:
    """Install all groups, continuing past failed ones; raise if any failed."""
    errors: list[DependencyInstallError] = []
    for group in groups:
        try:
            group.install_optional(logger)
        except DependencyInstallError as err:
            errors.append(err)
    if errors:
        raise DependencyInstallError("failed to install dependencies", errors)