"""Console and file log sink for a build run.

Every status message is timestamped, tagged with a severity, printed to the
console with colour and appended as plain text to the run's log file.
Subprocess output is mirrored verbatim to both destinations.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import TextIO

from rich.console import Console
from rich.markup import escape

from llama_rocm_build.types import Severity

logger = logging.getLogger(__name__)

LOG_FILE_PREFIX = "build_log_"

_SEVERITY_STYLES = {
    Severity.INFO: "blue",
    Severity.ERROR: "red",
    Severity.SUCCESS: "green",
    Severity.WARNING: "yellow",
}


def log_file_name(now: datetime) -> str:
    """Return the log file name for a run started at ``now``."""
    return f"{LOG_FILE_PREFIX}{now.strftime('%Y%m%d_%H%M%S')}.txt"


class LogSink:
    """Append-only destination for status messages and command output."""

    def __init__(
        self,
        log_path: Path,
        stream: TextIO,
        console: Console | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.log_path = log_path
        self._stream = stream
        self.console = console or Console()
        self._clock = clock

    @classmethod
    def open(
        cls,
        log_dir: Path,
        console: Console | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> LogSink:
        """Create the log directory and a fresh log file.

        Raises:
            OSError: If the directory or file cannot be created.
        """
        log_dir.mkdir(parents=True, exist_ok=True)
        started = clock()
        log_path = log_dir / log_file_name(started)
        stream = log_path.open("w", encoding="utf-8")
        stream.write(f"Build Log - {started.strftime('%a %b %d %H:%M:%S %Y')}\n")
        stream.write("=" * 33 + "\n")
        stream.flush()
        logger.debug("Opened build log %s", log_path)
        return cls(log_path, stream, console=console, clock=clock)

    def emit(self, severity: Severity, message: str) -> None:
        """Write a tagged, timestamped message to the console and log file."""
        stamp = self._clock().strftime("%H:%M:%S")
        tag = severity.value.upper()
        style = _SEVERITY_STYLES[severity]
        self.console.print(
            f"[blue]\\[{stamp}][/blue] [{style}]\\[{tag}][/{style}] {escape(message)}",
            highlight=False,
        )
        self._write(f"[{stamp}] [{tag}] {message}\n")

    def info(self, message: str) -> None:
        self.emit(Severity.INFO, message)

    def error(self, message: str) -> None:
        self.emit(Severity.ERROR, message)

    def success(self, message: str) -> None:
        self.emit(Severity.SUCCESS, message)

    def warning(self, message: str) -> None:
        self.emit(Severity.WARNING, message)

    def echo(self, text: str, style: str | None = None) -> None:
        """Print untagged text to the console and append it to the log file."""
        self.console.print(text, style=style, markup=False, highlight=False)
        self._write(text + "\n")

    def output(self, line: str) -> None:
        """Mirror a line of subprocess output."""
        line = line.rstrip("\n")
        self.console.print(line, markup=False, highlight=False)
        self._write(line + "\n")

    def _write(self, text: str) -> None:
        self._stream.write(text)
        self._stream.flush()

    def close(self) -> None:
        if not self._stream.closed:
            self._stream.close()

    def __enter__(self) -> LogSink:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


__all__ = ["LOG_FILE_PREFIX", "LogSink", "log_file_name"]
