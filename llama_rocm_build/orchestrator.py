"""Build orchestrator.

Runs the build checkpoints in order:

1. Acquire the llama.cpp source tree (clone, or offer a pull)
2. Validate the ROCm installation root
3. Audit required pacman packages, offer installation
4. Offer the optional rocWMMA package
5. Reset the build output directory
6. Resolve HIP_PATH / HIPCXX / HIP_DEVICE_LIB_PATH
7. Collect build options
8. Configure with CMake, build with Ninja
9. Report binaries, GPU detection and the closing summary

Log initialisation (open_log_sink) happens first, before run_build.
Fatal checkpoints raise BuildAbortedError; the caller maps it to a
non-zero exit status. Every external command runs at most once.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console

from llama_rocm_build.config import Settings
from llama_rocm_build.errors import LOG_INIT_FAILED, BuildAbortedError
from llama_rocm_build.logsink import LogSink
from llama_rocm_build.prompts import Prompter
from llama_rocm_build.runner import CommandRunner
from llama_rocm_build.steps.cmake import (
    collect_options,
    compose_cmake_command,
    reset_build_dir,
    run_configure,
    run_ninja,
)
from llama_rocm_build.steps.packages import (
    ensure_optional_package,
    ensure_required_packages,
)
from llama_rocm_build.steps.report import (
    check_gpu_detection,
    list_built_binaries,
    print_summary,
)
from llama_rocm_build.steps.source import acquire_source
from llama_rocm_build.steps.toolchain import resolve_environment, validate_toolchain_root
from llama_rocm_build.types import BuildReport

logger = logging.getLogger(__name__)


def open_log_sink(log_dir: Path, console: Console | None = None) -> LogSink:
    """Create the log directory and open a fresh log for this run.

    Raises:
        BuildAbortedError: If the directory or file cannot be created.
    """
    try:
        return LogSink.open(log_dir, console=console)
    except OSError as e:
        raise BuildAbortedError(
            f"Failed to initialise build log in {log_dir}: {e}", code=LOG_INIT_FAILED
        ) from e


def run_build(
    settings: Settings,
    sink: LogSink,
    runner: CommandRunner,
    prompter: Prompter,
) -> BuildReport:
    """Run a full build.

    Args:
        settings: Effective settings.
        sink: Open log sink for this run.
        runner: Command runner for external tools.
        prompter: Source of yes/no answers.

    Returns:
        BuildReport describing the completed run.

    Raises:
        BuildAbortedError: If a fatal checkpoint fails.
    """
    source_dir = settings.llama_cpp_dir
    build_dir = settings.build_dir
    logger.debug("Starting build: source=%s build=%s", source_dir, build_dir)

    acquire_source(source_dir, settings.repo_url, runner, prompter, sink)
    validate_toolchain_root(settings.rocm_path, sink)

    audit = ensure_required_packages(
        settings.required_packages, runner, prompter, sink
    )
    rocwmma_available = ensure_optional_package(
        settings.optional_package, runner, prompter, sink
    )

    reset_build_dir(build_dir, sink)

    environment = resolve_environment(
        settings.rocm_path, settings.device_lib_marker, runner, sink
    )
    options = collect_options(prompter, sink, rocwmma_available=rocwmma_available)

    cmake_args = compose_cmake_command(
        source_dir, build_dir, settings.amdgpu_target, options
    )
    env = environment.as_env()
    run_configure(cmake_args, source_dir, env, runner, sink)
    run_ninja(build_dir, settings.jobs, env, runner, sink)

    bin_dir = build_dir / "bin"
    artifacts = list_built_binaries(bin_dir, sink)
    device_listing = check_gpu_detection(
        bin_dir / settings.primary_executable, runner, sink
    )

    print_summary(sink.log_path, sink)

    return BuildReport(
        options=options,
        environment=environment,
        audit=audit,
        cmake_args=cmake_args,
        log_path=sink.log_path,
        artifacts=artifacts,
        device_listing=device_listing,
    )


__all__ = ["open_log_sink", "run_build"]
