"""ROCm toolchain validation and environment discovery."""

from __future__ import annotations

import logging
from pathlib import Path

from llama_rocm_build.errors import TOOLCHAIN_MISSING, BuildAbortedError
from llama_rocm_build.logsink import LogSink
from llama_rocm_build.runner import CommandExecutionError, CommandRunner
from llama_rocm_build.types import EnvironmentSnapshot

logger = logging.getLogger(__name__)


def validate_toolchain_root(rocm_path: Path, sink: LogSink) -> None:
    """Ensure the ROCm installation root exists.

    Raises:
        BuildAbortedError: If the directory is missing.
    """
    if not rocm_path.is_dir():
        raise BuildAbortedError(
            f"ROCm path not found at {rocm_path}", code=TOOLCHAIN_MISSING
        )
    sink.info(f"ROCm path found at {rocm_path}")


def query_hipconfig(flag: str, runner: CommandRunner) -> str | None:
    """Return the stripped output of ``hipconfig <flag>``, or None on failure."""
    try:
        result = runner.run(["hipconfig", flag])
    except CommandExecutionError as e:
        logger.debug("hipconfig %s could not run: %s", flag, e)
        return None
    value = result.output.strip()
    if not result.success or not value:
        logger.debug("hipconfig %s returned %d", flag, result.returncode)
        return None
    return value


def find_device_lib(search_root: Path, marker: str) -> Path | None:
    """Return the directory holding the first ``marker`` file below the root."""
    if not search_root.is_dir():
        return None
    try:
        for path in search_root.rglob(marker):
            if path.is_file():
                return path.parent
    except OSError as e:
        logger.debug("Device library search under %s failed: %s", search_root, e)
    return None


def resolve_environment(
    rocm_path: Path,
    device_lib_marker: str,
    runner: CommandRunner,
    sink: LogSink,
) -> EnvironmentSnapshot:
    """Resolve HIP_PATH, HIPCXX and HIP_DEVICE_LIB_PATH.

    Unresolved values are left unset with a warning; the configure step
    reports the resulting error if it actually needs them.
    """
    sink.info("Setting up environment variables for ROCm build...")

    hip_path = query_hipconfig("-R", runner)
    if hip_path:
        sink.info(f"HIP_PATH set to: {hip_path}")
    else:
        sink.warning("Could not determine HIP_PATH from hipconfig -R")

    clang_dir = query_hipconfig("-l", runner)
    hipcxx = f"{clang_dir}/clang" if clang_dir else None
    if hipcxx:
        sink.info(f"HIPCXX set to: {hipcxx}")
    else:
        sink.warning("Could not determine HIPCXX from hipconfig -l")

    search_root = Path(hip_path) if hip_path else rocm_path
    device_lib = find_device_lib(search_root, device_lib_marker)
    if device_lib is not None:
        sink.info(f"Found device library at: {device_lib}")
        sink.info("Setting HIP_DEVICE_LIB_PATH environment variable")
    else:
        sink.warning(
            "Could not find device library path. If build fails with device "
            "library errors, you may need to set HIP_DEVICE_LIB_PATH manually."
        )

    return EnvironmentSnapshot(
        hip_path=hip_path,
        hipcxx=hipcxx,
        device_lib_path=str(device_lib) if device_lib is not None else None,
    )


__all__ = [
    "find_device_lib",
    "query_hipconfig",
    "resolve_environment",
    "validate_toolchain_root",
]
