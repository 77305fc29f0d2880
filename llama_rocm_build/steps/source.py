"""Acquire the llama.cpp source tree."""

from __future__ import annotations

import logging
from pathlib import Path

from llama_rocm_build.errors import CLONE_FAILED, BuildAbortedError
from llama_rocm_build.logsink import LogSink
from llama_rocm_build.prompts import Prompter, ask_yes_no
from llama_rocm_build.runner import CommandExecutionError, CommandRunner

logger = logging.getLogger(__name__)


def clone_repository(
    repo_url: str,
    target_dir: Path,
    runner: CommandRunner,
    sink: LogSink,
) -> None:
    """Clone the repository into ``target_dir``.

    Raises:
        BuildAbortedError: If the clone fails.
    """
    sink.info("Cloning the repository from GitHub...")
    try:
        result = runner.run(
            ["git", "clone", repo_url, str(target_dir)], on_output=sink.output
        )
    except CommandExecutionError as e:
        raise BuildAbortedError(str(e), code=CLONE_FAILED) from e

    if not result.success:
        raise BuildAbortedError(
            "Failed to clone llama.cpp repository", code=CLONE_FAILED
        )
    sink.success("Repository cloned successfully")


def update_repository(source_dir: Path, runner: CommandRunner, sink: LogSink) -> bool:
    """Pull updates into an existing checkout.

    Returns:
        True if the pull succeeded. Failure only logs a warning.
    """
    sink.info("Updating llama.cpp repository...")
    try:
        result = runner.run(["git", "pull"], cwd=source_dir, on_output=sink.output)
        ok = result.success
    except CommandExecutionError as e:
        logger.debug("git pull could not run: %s", e)
        ok = False

    if ok:
        sink.success("Repository updated successfully")
    else:
        sink.warning("Failed to update repository, continuing with existing code")
    return ok


def acquire_source(
    source_dir: Path,
    repo_url: str,
    runner: CommandRunner,
    prompter: Prompter,
    sink: LogSink,
) -> bool:
    """Clone the source tree if absent, otherwise offer to update it.

    Returns:
        True if a fresh clone was made.
    """
    if not source_dir.is_dir():
        sink.error(f"llama.cpp directory not found at {source_dir}")
        clone_repository(repo_url, source_dir, runner, sink)
        return True

    sink.info(f"Found existing llama.cpp directory at {source_dir}")
    if ask_yes_no(prompter, "Do you want to update the repository?"):
        update_repository(source_dir, runner, sink)
    return False


__all__ = ["acquire_source", "clone_repository", "update_repository"]
