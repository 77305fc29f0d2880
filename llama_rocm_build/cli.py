"""Thin CLI wrapper for llama_rocm_build.

This module provides the command-line interface using Typer.
All build logic is delegated to the orchestrator and its steps.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from llama_rocm_build import __version__
from llama_rocm_build.config import Settings, get_settings, print_settings_json
from llama_rocm_build.errors import BuildAbortedError
from llama_rocm_build.orchestrator import open_log_sink, run_build
from llama_rocm_build.prompts import ConsolePrompter
from llama_rocm_build.runner import SubprocessRunner

app = typer.Typer(
    name="llama-rocm-build",
    help="llama.cpp ROCm builder - clone, configure and build llama.cpp for AMD GPUs",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"llama-rocm-build version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """llama.cpp ROCm builder - clone, configure and build llama.cpp for AMD GPUs."""


def _settings_with_overrides(**overrides: object) -> Settings:
    values = {k: v for k, v in overrides.items() if v is not None}
    if not values:
        return get_settings()
    return Settings(**values)


@app.command()
def build(
    llama_dir: Annotated[
        Path | None,
        typer.Option("--llama-dir", help="llama.cpp source tree"),
    ] = None,
    rocm_path: Annotated[
        Path | None,
        typer.Option("--rocm-path", help="ROCm installation root"),
    ] = None,
    target: Annotated[
        str | None,
        typer.Option("--target", "-t", help="AMDGPU target architecture"),
    ] = None,
    jobs: Annotated[
        int | None,
        typer.Option("--jobs", "-j", min=1, help="Parallel build jobs"),
    ] = None,
    log_dir: Annotated[
        Path | None,
        typer.Option("--log-dir", help="Directory for build logs"),
    ] = None,
) -> None:
    """Clone or update llama.cpp and build it with the HIP backend.

    Asks a few yes/no questions along the way; any answer other than
    "y" is treated as no.
    """
    settings = _settings_with_overrides(
        llama_cpp_dir=llama_dir,
        rocm_path=rocm_path,
        amdgpu_target=target,
        jobs=jobs,
        log_dir=log_dir,
    )
    logging.basicConfig(level=settings.log_level)

    try:
        sink = open_log_sink(settings.log_dir, console=console)
    except BuildAbortedError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(code=1) from None

    with sink:
        try:
            run_build(
                settings,
                sink=sink,
                runner=SubprocessRunner(),
                prompter=ConsolePrompter(),
            )
        except BuildAbortedError as e:
            sink.error(e.message)
            raise typer.Exit(code=1) from None


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings), soft_wrap=True, highlight=False)
        return

    jobs_display = str(settings.jobs) if settings.jobs else "(processor count)"
    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]Paths:[/bold]")
    console.print(f"  llama.cpp directory: {settings.llama_cpp_dir}")
    console.print(f"  Build directory:     {settings.build_dir}")
    console.print(f"  Log directory:       {settings.log_dir}")
    console.print(f"  ROCm path:           {settings.rocm_path}")
    console.print()
    console.print("[bold]Source:[/bold]")
    console.print(f"  Repository URL:      {settings.repo_url}")
    console.print()
    console.print("[bold]Toolchain:[/bold]")
    console.print(f"  AMDGPU target:       {settings.amdgpu_target}")
    console.print(f"  Required packages:   {' '.join(settings.required_packages)}")
    console.print(f"  Optional package:    {settings.optional_package}")
    console.print(f"  Device lib marker:   {settings.device_lib_marker}")
    console.print()
    console.print("[bold]Build:[/bold]")
    console.print(f"  Parallel jobs:       {jobs_display}")
    console.print(f"  Log level:           {settings.log_level}")


if __name__ == "__main__":
    app()
