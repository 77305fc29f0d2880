"""Shared fixtures: scripted command runner, prompter and log sink."""

from __future__ import annotations

import io
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pytest
from rich.console import Console

from llama_rocm_build.config import Settings
from llama_rocm_build.logsink import LogSink
from llama_rocm_build.runner import CommandExecutionError
from llama_rocm_build.types import CommandResult


@dataclass
class Call:
    """A recorded command invocation."""

    command: list[str]
    cwd: Path | None
    env_override: dict[str, str] | None
    capture: bool
    streamed: bool


@dataclass
class Response:
    returncode: int = 0
    output: str = ""
    error: bool = False
    side_effect: Callable[[], None] | None = None


@dataclass
class FakeRunner:
    """CommandRunner returning scripted results keyed by command prefix.

    The longest registered prefix wins; unmatched commands succeed with
    no output.
    """

    responses: dict[tuple[str, ...], Response] = field(default_factory=dict)
    calls: list[Call] = field(default_factory=list)

    def set(
        self,
        *prefix: str,
        returncode: int = 0,
        output: str = "",
        error: bool = False,
        side_effect: Callable[[], None] | None = None,
    ) -> None:
        self.responses[prefix] = Response(returncode, output, error, side_effect)

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env_override: Mapping[str, str] | None = None,
        on_output: Callable[[str], None] | None = None,
        capture: bool = True,
    ) -> CommandResult:
        cmd = list(command)
        self.calls.append(
            Call(
                command=cmd,
                cwd=cwd,
                env_override=dict(env_override) if env_override is not None else None,
                capture=capture,
                streamed=on_output is not None,
            )
        )
        response = self._match(cmd)
        if response.error:
            raise CommandExecutionError(f"Failed to run {cmd[0]}: not found")
        if response.side_effect is not None:
            response.side_effect()
        if on_output is not None:
            for line in response.output.splitlines():
                on_output(line)
        return CommandResult(command=cmd, returncode=response.returncode, output=response.output)

    def _match(self, cmd: list[str]) -> Response:
        best: tuple[str, ...] | None = None
        for prefix in self.responses:
            if tuple(cmd[: len(prefix)]) == prefix and (
                best is None or len(prefix) > len(best)
            ):
                best = prefix
        return self.responses[best] if best is not None else Response()

    def invoked(self, *prefix: str) -> list[Call]:
        return [c for c in self.calls if tuple(c.command[: len(prefix)]) == prefix]


class ScriptedPrompter:
    """Prompter answering from a fixed list and recording each question."""

    def __init__(self, answers: Sequence[str] = ()) -> None:
        self.answers = list(answers)
        self.questions: list[str] = []

    def ask(self, question: str) -> str:
        self.questions.append(question)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {question}")
        return self.answers.pop(0)


FIXED_NOW = datetime(2025, 3, 14, 9, 26, 53)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def console_buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def sink(tmp_path: Path, console_buffer: io.StringIO):
    """Open a LogSink writing to a buffer console and a temp log dir."""
    console = Console(file=console_buffer, force_terminal=False, width=200)
    log_sink = LogSink.open(tmp_path / "logs", console=console, clock=lambda: FIXED_NOW)
    try:
        yield log_sink
    finally:
        log_sink.close()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at temp directories with an existing ROCm root."""
    rocm = tmp_path / "rocm"
    rocm.mkdir()
    return Settings(
        llama_cpp_dir=tmp_path / "llama.cpp",
        rocm_path=rocm,
        log_dir=tmp_path / "logs",
        jobs=8,
    )
