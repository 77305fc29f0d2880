"""Shared type definitions for llama_rocm_build.

This module contains dataclasses and enums shared across the build steps
to avoid circular imports.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Severity(str, Enum):
    """Severity tag of a status message."""

    INFO = "info"
    ERROR = "error"
    SUCCESS = "success"
    WARNING = "warning"


@dataclass(frozen=True)
class BuildOptions:
    """User-selected build options, in prompt order.

    Attributes:
        use_rocwmma: Enable rocWMMA flash attention.
        build_server: Build the server (API) variant.
        enable_multigpu: Enable multi-GPU support.
    """

    use_rocwmma: bool = False
    build_server: bool = False
    enable_multigpu: bool = False


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Toolchain paths exported to the configure and build steps."""

    hip_path: str | None = None
    hipcxx: str | None = None
    device_lib_path: str | None = None

    def as_env(self) -> dict[str, str]:
        """Return the resolved values as environment variables."""
        env: dict[str, str] = {}
        if self.hip_path:
            env["HIP_PATH"] = self.hip_path
        if self.hipcxx:
            env["HIPCXX"] = self.hipcxx
        if self.device_lib_path:
            env["HIP_DEVICE_LIB_PATH"] = self.device_lib_path
        return env


@dataclass(frozen=True)
class PackageAuditResult:
    """Required packages partitioned into present and missing."""

    present: tuple[str, ...] = ()
    missing: tuple[str, ...] = ()

    @property
    def all_present(self) -> bool:
        return not self.missing


@dataclass
class CommandResult:
    """Result of an external command."""

    command: list[str]
    returncode: int
    output: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


@dataclass
class ArtifactInfo:
    """An executable produced by the build."""

    filename: str
    relative_path: str
    size_bytes: int


@dataclass
class BuildReport:
    """Outcome of a completed build run."""

    options: BuildOptions
    environment: EnvironmentSnapshot
    audit: PackageAuditResult
    cmake_args: list[str]
    log_path: Path
    artifacts: list[ArtifactInfo] = field(default_factory=list)
    device_listing: str | None = None


__all__ = [
    "ArtifactInfo",
    "BuildOptions",
    "BuildReport",
    "CommandResult",
    "EnvironmentSnapshot",
    "PackageAuditResult",
    "Severity",
]
