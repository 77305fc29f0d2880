"""Configuration settings for llama_rocm_build.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REQUIRED_PACKAGES = [
    "rocm-hip-sdk",
    "hipblas",
    "rocblas",
    "rocm-cmake",
    "rocm-llvm",
]


def _default_llama_cpp_dir() -> Path:
    """Return the default llama.cpp checkout directory."""
    return Path.home() / "llama.cpp"


def _default_log_dir() -> Path:
    """Return the default build log directory."""
    return Path.home() / ".local" / "share" / "llama-rocm-build" / "build_logs"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the LLAMA_ROCM_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="LLAMA_ROCM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    llama_cpp_dir: Path = Field(
        default_factory=_default_llama_cpp_dir,
        description="llama.cpp source tree (cloned if absent)",
    )
    log_dir: Path = Field(
        default_factory=_default_log_dir,
        description="Directory receiving one timestamped log file per run",
    )
    rocm_path: Path = Field(
        default=Path("/opt/rocm"),
        description="ROCm toolchain installation root",
    )

    # Source
    repo_url: str = Field(
        default="https://github.com/ggerganov/llama.cpp.git",
        description="Git remote cloned when the source tree is missing",
    )

    # Toolchain
    amdgpu_target: str = Field(
        default="gfx1100",
        description="AMDGPU architecture passed to AMDGPU_TARGETS",
    )
    required_packages: list[str] = Field(
        default_factory=lambda: list(DEFAULT_REQUIRED_PACKAGES),
        description="pacman packages the HIP build needs",
    )
    optional_package: str = Field(
        default="rocwmma-dev",
        description="Optional package enabling rocWMMA flash attention",
    )
    device_lib_marker: str = Field(
        default="oclc_abi_version_400.bc",
        description="File whose directory becomes HIP_DEVICE_LIB_PATH",
    )
    primary_executable: str = Field(
        default="llama-cli",
        description="Built binary used for the GPU detection check",
    )

    # Build
    jobs: int | None = Field(
        default=None,
        ge=1,
        description="Ninja parallelism (uses the processor count if not set)",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level for diagnostic messages",
    )

    @property
    def build_dir(self) -> Path:
        """Build output directory, recreated on every run."""
        return self.llama_cpp_dir / "build"


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["DEFAULT_REQUIRED_PACKAGES", "Settings", "get_settings", "print_settings_json"]
