"""Command runner for external tools.

This module handles:
- Running git, pacman, hipconfig, cmake and ninja
- Streaming merged stdout/stderr line by line to a callback
- Capturing output of short discovery commands
- Passing the terminal through to interactive commands (sudo pacman)

The orchestrator depends only on the CommandRunner protocol so tests can
substitute deterministic fakes.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Protocol

from llama_rocm_build.types import CommandResult

logger = logging.getLogger(__name__)

OutputCallback = Callable[[str], None]


class CommandExecutionError(Exception):
    """Raised when a command cannot be executed at all."""

    def __init__(self, message: str, code: str = "execution_error") -> None:
        super().__init__(message)
        self.code = code


class CommandRunner(Protocol):
    """Capability for running external commands."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env_override: Mapping[str, str] | None = None,
        on_output: OutputCallback | None = None,
        capture: bool = True,
    ) -> CommandResult: ...


def _merge_env(env_override: Mapping[str, str] | None) -> dict[str, str] | None:
    if not env_override:
        return None
    env = dict(os.environ)
    env.update(env_override)
    return env


class SubprocessRunner:
    """CommandRunner backed by the subprocess module.

    Three modes are supported:
    - ``on_output`` given: stream merged stdout/stderr line by line.
    - ``capture=True``: collect stdout/stderr and return them.
    - ``capture=False``: inherit the terminal (interactive commands).
    """

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env_override: Mapping[str, str] | None = None,
        on_output: OutputCallback | None = None,
        capture: bool = True,
    ) -> CommandResult:
        """Run a command to completion.

        Args:
            command: Program and arguments.
            cwd: Working directory for the command.
            env_override: Variables merged over the current environment.
            on_output: Called with each output line when streaming.
            capture: Capture output instead of inheriting the terminal.

        Returns:
            CommandResult with the exit status and any collected output.

        Raises:
            CommandExecutionError: If the command cannot be started.
        """
        cmd = list(command)
        cmd_str = shlex.join(cmd)
        env = _merge_env(env_override)
        logger.debug("Executing: %s (cwd=%s)", cmd_str, cwd)

        try:
            if on_output is not None:
                return self._stream(cmd, cwd, env, on_output)

            if capture:
                result = subprocess.run(
                    cmd,
                    cwd=cwd,
                    env=env,
                    capture_output=True,
                    text=True,
                    check=False,
                )
                output = result.stdout + result.stderr
            else:
                result = subprocess.run(cmd, cwd=cwd, env=env, check=False)
                output = ""
        except OSError as e:
            raise CommandExecutionError(f"Failed to run {cmd_str}: {e}") from e

        logger.debug("%s exited with %d", cmd_str, result.returncode)
        return CommandResult(command=cmd, returncode=result.returncode, output=output)

    def _stream(
        self,
        cmd: list[str],
        cwd: Path | None,
        env: dict[str, str] | None,
        on_output: OutputCallback,
    ) -> CommandResult:
        lines: list[str] = []
        with subprocess.Popen(
            cmd,
            cwd=cwd,
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        ) as proc:
            assert proc.stdout is not None
            for line in proc.stdout:
                lines.append(line)
                on_output(line)
            returncode = proc.wait()

        logger.debug("%s exited with %d", shlex.join(cmd), returncode)
        return CommandResult(command=cmd, returncode=returncode, output="".join(lines))


__all__ = [
    "CommandExecutionError",
    "CommandRunner",
    "OutputCallback",
    "SubprocessRunner",
]
