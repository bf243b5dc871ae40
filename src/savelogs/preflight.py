"""Best-effort installation of the optional tools some tasks depend on."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .capabilities import first_available, is_available
from .commands import CommandRunner


LOGGER = logging.getLogger("savelogs.preflight")

# Each group is satisfied by any one of its tools; installs are tried in order.
OPTIONAL_TOOL_GROUPS = (
    ("tree",),
    ("fastfetch", "neofetch"),
)


class PackageInstaller:
    """Capability interface over a host package manager."""

    name = "none"

    def detect(self) -> bool:  # pragma: no cover - documentation method
        raise NotImplementedError

    def install(self, package: str) -> bool:  # pragma: no cover - documentation method
        raise NotImplementedError

    def install_if_missing(self, tools: Sequence[str]) -> Optional[str]:
        """
        Make sure one of *tools* is on PATH, installing them in order if needed.

        Returns the tool that ended up available, or None. Never raises.
        """
        present = first_available(tools)
        if present:
            return present
        for tool in tools:
            LOGGER.warning("'%s' not found. Attempting to install (%s)...", tool, self.name)
            if self.install(tool) and is_available(tool):
                return tool
            LOGGER.warning("Could not install '%s'.", tool)
        return None


class NullInstaller(PackageInstaller):
    """Used when no supported package manager is present."""

    name = "none"

    def detect(self) -> bool:
        return True

    def install(self, package: str) -> bool:
        LOGGER.warning("No supported package manager found; cannot auto-install %s.", package)
        return False


class AptInstaller(PackageInstaller):
    """Debian-family installer driving `apt-get`."""

    name = "apt"

    def __init__(self, runner: Optional[CommandRunner] = None) -> None:
        self._runner = runner or CommandRunner()
        self._updated = False

    def detect(self) -> bool:
        return is_available("apt-get")

    def install(self, package: str) -> bool:
        if not self._updated:
            update = self._runner.run(["apt-get", "update", "-y"])
            self._updated = True
            if not update.ok:
                LOGGER.warning("apt-get update failed: %s", update.describe_failure())
        result = self._runner.run(["apt-get", "install", "-y", package])
        if not result.ok:
            LOGGER.warning("apt-get install %s failed: %s", package, result.describe_failure())
            return False
        LOGGER.info("Installed %s via apt-get.", package)
        return True


def detect_installer(runner: Optional[CommandRunner] = None) -> PackageInstaller:
    apt = AptInstaller(runner)
    if apt.detect():
        return apt
    return NullInstaller()


@dataclass
class PreflightReport:
    available: List[str] = field(default_factory=list)
    unavailable: List[Sequence[str]] = field(default_factory=list)


def run_preflight(
    installer: PackageInstaller,
    groups: Sequence[Sequence[str]] = OPTIONAL_TOOL_GROUPS,
) -> PreflightReport:
    """Try to provide every optional tool group; absence only disables dependent tasks."""
    report = PreflightReport()
    for tools in groups:
        try:
            found = installer.install_if_missing(tools)
        except Exception as exc:  # installer problems never fail the run
            LOGGER.warning("Installer error while providing %s: %s", "/".join(tools), exc)
            found = None
        if found:
            report.available.append(found)
        else:
            LOGGER.warning("'%s' still not available. Dependent logs will be skipped.", "/".join(tools))
            report.unavailable.append(tuple(tools))
    return report
