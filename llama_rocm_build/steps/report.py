"""Build result reporting.

This module handles:
- Discovering executables in the build output's bin directory
- Running the primary binary's GPU device listing (best effort)
- Printing the closing summary and usage examples
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from llama_rocm_build.logsink import LogSink
from llama_rocm_build.runner import CommandExecutionError, CommandRunner
from llama_rocm_build.types import ArtifactInfo

logger = logging.getLogger(__name__)

USAGE_EXAMPLES = """
Example usage for single GPU:
  ./build/bin/llama-cli -m /path/to/model.gguf -n 512 -ngl 99

Example usage for dual GPUs:
  ./build/bin/llama-cli -m /path/to/model.gguf -n 512 -ngl 99 -ts 8192

To test GPU offloading:
  ./build/bin/llama-benchmark -m /path/to/model.gguf -ngl 99

If you built the server, start it with:
  ./build/bin/llama-server -m /path/to/model.gguf -ngl 99
"""


def discover_executables(bin_dir: Path) -> list[ArtifactInfo]:
    """Find executable regular files under ``bin_dir``.

    Args:
        bin_dir: Build output binary directory.

    Returns:
        ArtifactInfo for each executable, sorted by path.
    """
    if not bin_dir.is_dir():
        logger.warning("Build output directory does not exist: %s", bin_dir)
        return []

    artifacts: list[ArtifactInfo] = []
    for path in sorted(bin_dir.rglob("*")):
        if not path.is_file() or not os.access(path, os.X_OK):
            continue
        artifacts.append(
            ArtifactInfo(
                filename=path.name,
                relative_path=path.relative_to(bin_dir).as_posix(),
                size_bytes=path.stat().st_size,
            )
        )

    logger.debug("Discovered %d executables in %s", len(artifacts), bin_dir)
    return artifacts


def list_built_binaries(bin_dir: Path, sink: LogSink) -> list[ArtifactInfo]:
    """Log every produced executable."""
    sink.info("Built binaries:")
    artifacts = discover_executables(bin_dir)
    for artifact in artifacts:
        sink.output(str(bin_dir / artifact.relative_path))
    return artifacts


def check_gpu_detection(
    executable: Path,
    runner: CommandRunner,
    sink: LogSink,
) -> str | None:
    """Run ``<executable> --list-devices`` and log its output.

    Failure only logs a warning since the listing is informational.

    Returns:
        The listing output, or None if the executable is absent or failed.
    """
    if not executable.is_file():
        logger.debug("Skipping GPU detection, %s not built", executable)
        return None

    sink.info("Testing GPU detection...")
    try:
        result = runner.run(
            [str(executable), "--list-devices"], on_output=sink.output
        )
    except CommandExecutionError as e:
        sink.warning(f"GPU detection could not run: {e}")
        return None

    if not result.success:
        sink.warning(f"GPU detection exited with status {result.returncode}")
        return None
    return result.output


def print_summary(log_path: Path, sink: LogSink) -> None:
    """Log completion, then show the log location and usage examples.

    The banner and examples go to the log file as well as the console.
    """
    sink.info("Build script completed!")
    rule = "=" * 25
    sink.echo(rule, style="green")
    sink.echo(f"  Build Log: {log_path} ", style="green")
    sink.echo(rule, style="green")
    sink.echo(USAGE_EXAMPLES)


__all__ = [
    "USAGE_EXAMPLES",
    "check_gpu_detection",
    "discover_executables",
    "list_built_binaries",
    "print_summary",
]
