"""pacman package audit and installation.

Package problems never abort the run: a missing package usually surfaces
later as a configure or build failure, which is reported on its own.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from llama_rocm_build.logsink import LogSink
from llama_rocm_build.prompts import Prompter, ask_yes_no
from llama_rocm_build.runner import CommandExecutionError, CommandRunner
from llama_rocm_build.types import PackageAuditResult

logger = logging.getLogger(__name__)


def is_package_installed(package: str, runner: CommandRunner) -> bool:
    """Return True if pacman reports the package as installed."""
    try:
        result = runner.run(["pacman", "-Q", package])
    except CommandExecutionError as e:
        logger.debug("pacman query for %s failed: %s", package, e)
        return False
    return result.success


def audit_packages(packages: Sequence[str], runner: CommandRunner) -> PackageAuditResult:
    """Partition packages into present and missing, keeping input order."""
    present: list[str] = []
    missing: list[str] = []
    for pkg in packages:
        if is_package_installed(pkg, runner):
            present.append(pkg)
        else:
            missing.append(pkg)
    return PackageAuditResult(present=tuple(present), missing=tuple(missing))


def install_packages(packages: Sequence[str], runner: CommandRunner) -> bool:
    """Install packages with ``sudo pacman -Syu``.

    The command shares the terminal so pacman and sudo can prompt.

    Returns:
        True if the install succeeded.
    """
    try:
        result = runner.run(["sudo", "pacman", "-Syu", *packages], capture=False)
    except CommandExecutionError as e:
        logger.debug("pacman install failed to start: %s", e)
        return False
    return result.success


def ensure_required_packages(
    packages: Sequence[str],
    runner: CommandRunner,
    prompter: Prompter,
    sink: LogSink,
) -> PackageAuditResult:
    """Audit required packages and offer to install the missing ones."""
    audit = audit_packages(packages, runner)

    if audit.all_present:
        sink.info("All required packages are installed")
        return audit

    sink.warning(f"Some required packages are missing: {' '.join(audit.missing)}")
    if not ask_yes_no(prompter, "Do you want to install them now?"):
        sink.warning("Continuing without installing required packages. Build might fail.")
        return audit

    sink.info("Installing missing packages...")
    if install_packages(audit.missing, runner):
        sink.success("Packages installed successfully")
    else:
        sink.warning("Failed to install required packages. Build might fail.")
    return audit


def ensure_optional_package(
    package: str,
    runner: CommandRunner,
    prompter: Prompter,
    sink: LogSink,
) -> bool:
    """Offer the rocWMMA package used for faster flash attention.

    Returns:
        True if the package is installed after this step.
    """
    if is_package_installed(package, runner):
        return True

    sink.warning(
        f"{package} package is not installed. "
        "This package can improve flash attention performance."
    )
    if not ask_yes_no(prompter, f"Do you want to install {package}?"):
        return False

    sink.info(f"Installing {package}...")
    if install_packages([package], runner):
        sink.success(f"{package} installed successfully")
        return True

    sink.warning(f"Failed to install {package}, continuing without it")
    return False


__all__ = [
    "audit_packages",
    "ensure_optional_package",
    "ensure_required_packages",
    "install_packages",
    "is_package_installed",
]
