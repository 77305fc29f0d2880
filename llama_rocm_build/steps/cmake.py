"""CMake configure and Ninja build steps.

This module handles:
- Resetting the build output directory
- Collecting build options from the user
- Composing the `cmake` configure command
- Running the configure and build commands with streamed output
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
from collections.abc import Mapping
from pathlib import Path

from llama_rocm_build.errors import (
    BUILD_DIR_CREATE_FAILED,
    BUILD_DIR_REMOVE_FAILED,
    BUILD_FAILED,
    CHDIR_FAILED,
    CONFIGURE_FAILED,
    BuildAbortedError,
)
from llama_rocm_build.logsink import LogSink
from llama_rocm_build.prompts import Prompter, ask_yes_no
from llama_rocm_build.runner import CommandExecutionError, CommandRunner
from llama_rocm_build.types import BuildOptions

logger = logging.getLogger(__name__)

# Appended in this order when the matching option is enabled
OPTION_FLAGS: tuple[tuple[str, str], ...] = (
    ("use_rocwmma", "-DGGML_HIP_ROCWMMA_FATTN=ON"),
    ("build_server", "-DLLAMA_BUILD_SERVER=ON"),
    ("enable_multigpu", "-DLLAMA_HIP_FORCE_DISABLE=OFF"),
)


def reset_build_dir(build_dir: Path, sink: LogSink) -> None:
    """Remove any previous build directory and create it empty.

    Raises:
        BuildAbortedError: If removal or creation fails.
    """
    if build_dir.exists():
        sink.info("Removing old build directory...")
        try:
            if build_dir.is_dir() and not build_dir.is_symlink():
                shutil.rmtree(build_dir)
            else:
                build_dir.unlink()
        except OSError as e:
            raise BuildAbortedError(
                f"Failed to remove old build directory: {e}",
                code=BUILD_DIR_REMOVE_FAILED,
            ) from e

    sink.info("Creating fresh build directory...")
    try:
        build_dir.mkdir(parents=True)
    except OSError as e:
        raise BuildAbortedError(
            f"Failed to create build directory: {e}",
            code=BUILD_DIR_CREATE_FAILED,
        ) from e


def collect_options(
    prompter: Prompter,
    sink: LogSink,
    rocwmma_available: bool,
) -> BuildOptions:
    """Ask the build option questions in order.

    The rocWMMA question is only asked when the package is installed.
    """
    use_rocwmma = False
    if rocwmma_available:
        use_rocwmma = ask_yes_no(
            prompter,
            "Do you want to enable rocWMMA for potential flash attention "
            "performance improvement?",
        )
        if use_rocwmma:
            sink.info("Enabling rocWMMA for flash attention")

    build_server = ask_yes_no(
        prompter, "Do you want to build the server (API) version as well?"
    )
    if build_server:
        sink.info("Will build server (API) version")

    enable_multigpu = ask_yes_no(
        prompter, "Do you want to enable multi-GPU support for your multi-GPU setup?"
    )
    if enable_multigpu:
        sink.info("Enabling multi-GPU support")

    return BuildOptions(
        use_rocwmma=use_rocwmma,
        build_server=build_server,
        enable_multigpu=enable_multigpu,
    )


def compose_cmake_command(
    source_dir: Path,
    build_dir: Path,
    amdgpu_target: str,
    options: BuildOptions,
) -> list[str]:
    """Compose the `cmake` configure command.

    Args:
        source_dir: llama.cpp source tree.
        build_dir: Build output directory.
        amdgpu_target: GPU architecture, e.g. ``gfx1100``.
        options: User-selected build options.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    cmd = [
        "cmake",
        "-S",
        str(source_dir),
        "-B",
        str(build_dir),
        "-G",
        "Ninja",
        "-DCMAKE_BUILD_TYPE=Release",
        "-DGGML_HIP=ON",
        f"-DAMDGPU_TARGETS={amdgpu_target}",
        "-DLLAMA_CUBLAS=OFF",
    ]

    for attr, flag in OPTION_FLAGS:
        if getattr(options, attr):
            cmd.append(flag)

    return cmd


def compose_ninja_command(jobs: int | None = None) -> list[str]:
    """Compose the `ninja` build command.

    Args:
        jobs: Parallel job count (defaults to the processor count).
    """
    if jobs is None:
        jobs = os.cpu_count() or 1
    return ["ninja", f"-j{jobs}"]


def _run_streamed(
    cmd: list[str],
    cwd: Path,
    env: Mapping[str, str],
    runner: CommandRunner,
    sink: LogSink,
    failure_message: str,
    code: str,
) -> None:
    if not cwd.is_dir():
        raise BuildAbortedError(f"Failed to change to directory {cwd}", code=CHDIR_FAILED)

    try:
        result = runner.run(cmd, cwd=cwd, env_override=env, on_output=sink.output)
    except CommandExecutionError as e:
        raise BuildAbortedError(f"{failure_message}: {e}", code=code) from e

    if not result.success:
        logger.debug("%s exited with %d", cmd[0], result.returncode)
        raise BuildAbortedError(failure_message, code=code)


def run_configure(
    cmd: list[str],
    source_dir: Path,
    env: Mapping[str, str],
    runner: CommandRunner,
    sink: LogSink,
) -> None:
    """Run the configure command from the source tree.

    Raises:
        BuildAbortedError: If the source tree is missing or cmake fails.
    """
    sink.info("Configuring CMake...")
    sink.info(f"Running CMake with the following arguments: {shlex.join(cmd[1:])}")
    _run_streamed(
        cmd, source_dir, env, runner, sink, "CMake configuration failed", CONFIGURE_FAILED
    )
    sink.success("CMake configuration completed successfully")


def run_ninja(
    build_dir: Path,
    jobs: int | None,
    env: Mapping[str, str],
    runner: CommandRunner,
    sink: LogSink,
) -> None:
    """Run the parallel build from the build directory.

    Raises:
        BuildAbortedError: If the build directory is missing or ninja fails.
    """
    cmd = compose_ninja_command(jobs)
    sink.info(f"Building llama.cpp with Ninja ({cmd[1]})...")
    _run_streamed(cmd, build_dir, env, runner, sink, "Build failed", BUILD_FAILED)
    sink.success("Build completed successfully!")


__all__ = [
    "OPTION_FLAGS",
    "collect_options",
    "compose_cmake_command",
    "compose_ninja_command",
    "reset_build_dir",
    "run_configure",
    "run_ninja",
]
