"""Smoke tests for the CLI.

These tests verify CLI behaviour without invoking git, pacman or the
ROCm toolchain; the build command runs against a scripted runner.
"""

import json
import subprocess
import sys

import pytest
from typer.testing import CliRunner

from llama_rocm_build import __version__
from llama_rocm_build import cli as cli_module
from llama_rocm_build.cli import app

from conftest import FakeRunner

runner = CliRunner()


class TestCLIHelp:
    """Test CLI help and version commands."""

    def test_help_returns_zero(self) -> None:
        """CLI --help should return exit code 0."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "llama.cpp ROCm builder" in result.stdout

    def test_version_flag(self) -> None:
        """CLI --version should print version and exit 0."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_short_version_flag(self) -> None:
        """CLI -V should print version and exit 0."""
        result = runner.invoke(app, ["-V"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_no_args_shows_help(self) -> None:
        """CLI with no args should show help."""
        result = runner.invoke(app, [])
        assert "Usage:" in result.output

    def test_build_help(self) -> None:
        """CLI build --help should list the override options."""
        result = runner.invoke(app, ["build", "--help"])
        assert result.exit_code == 0
        assert "--llama-dir" in result.stdout
        assert "--rocm-path" in result.stdout


class TestCLIConfig:
    """Test CLI config command."""

    def test_config_command_shows_all_settings(self) -> None:
        """CLI config should show all configuration sections."""
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "Paths:" in result.stdout
        assert "Source:" in result.stdout
        assert "Toolchain:" in result.stdout
        assert "Build:" in result.stdout
        assert "llama.cpp directory" in result.stdout
        assert "ROCm path" in result.stdout
        assert "AMDGPU target" in result.stdout
        assert "Parallel jobs" in result.stdout

    def test_config_json_contains_all_fields(self) -> None:
        """CLI config --json should contain all config fields."""
        result = runner.invoke(app, ["config", "--json"])
        assert result.exit_code == 0
        config_data = json.loads(result.stdout)
        expected_keys = [
            "llama_cpp_dir",
            "log_dir",
            "rocm_path",
            "repo_url",
            "amdgpu_target",
            "required_packages",
            "optional_package",
            "device_lib_marker",
            "primary_executable",
            "jobs",
            "log_level",
        ]
        for key in expected_keys:
            assert key in config_data, f"Missing key: {key}"


class TestCLIBuild:
    """Test CLI build command against a scripted runner."""

    @pytest.fixture
    def fake_runner(self, monkeypatch) -> FakeRunner:
        fake = FakeRunner()
        monkeypatch.setattr(cli_module, "SubprocessRunner", lambda: fake)
        return fake

    def _args(self, tmp_path):
        rocm = tmp_path / "rocm"
        rocm.mkdir(exist_ok=True)
        return [
            "build",
            "--llama-dir",
            str(tmp_path / "llama.cpp"),
            "--rocm-path",
            str(rocm),
            "--log-dir",
            str(tmp_path / "logs"),
            "--jobs",
            "3",
        ]

    def test_successful_build(self, tmp_path, fake_runner) -> None:
        """A full run should exit 0 and print the summary."""
        result = runner.invoke(app, self._args(tmp_path), input="y\ny\nn\n")

        assert result.exit_code == 0, result.output
        assert "Build Log:" in result.output
        cmake = fake_runner.invoked("cmake")[0].command
        assert cmake[-2:] == ["-DGGML_HIP_ROCWMMA_FATTN=ON", "-DLLAMA_BUILD_SERVER=ON"]
        assert fake_runner.invoked("ninja")[0].command == ["ninja", "-j3"]
        logs = list((tmp_path / "logs").glob("build_log_*.txt"))
        assert len(logs) == 1

    def test_clone_failure_exits_nonzero(self, tmp_path, fake_runner) -> None:
        """A fatal checkpoint should exit 1 and log the error."""
        fake_runner.set("git", "clone", returncode=128)

        result = runner.invoke(app, self._args(tmp_path))

        assert result.exit_code == 1
        assert fake_runner.invoked("cmake") == []
        log = next((tmp_path / "logs").glob("build_log_*.txt")).read_text()
        assert "[ERROR] Failed to clone llama.cpp repository" in log

    def test_configure_failure_exits_nonzero(self, tmp_path, fake_runner) -> None:
        fake_runner.set("cmake", returncode=1)

        result = runner.invoke(app, self._args(tmp_path), input="n\nn\nn\n")

        assert result.exit_code == 1
        assert fake_runner.invoked("ninja") == []

    def test_log_dir_failure_exits_nonzero(self, tmp_path, fake_runner) -> None:
        blocker = tmp_path / "logs"
        blocker.write_text("file in the way")

        result = runner.invoke(app, self._args(tmp_path))

        assert result.exit_code == 1
        assert fake_runner.calls == []
        assert "Failed to initialise build log" in result.output

    def test_closed_stdin_answers_no(self, tmp_path, fake_runner) -> None:
        """End of input should decline every question instead of aborting."""
        (tmp_path / "llama.cpp").mkdir()

        result = runner.invoke(app, self._args(tmp_path), input="")

        assert result.exit_code == 0, result.output
        assert fake_runner.invoked("git") == []
        cmake = fake_runner.invoked("cmake")[0].command
        assert cmake[-1] == "-DLLAMA_CUBLAS=OFF"
        assert len(fake_runner.invoked("ninja")) == 1


class TestModuleEntryPoint:
    """Test python -m llama_rocm_build entry point."""

    def test_module_help(self) -> None:
        """python -m llama_rocm_build --help should work."""
        result = subprocess.run(
            [sys.executable, "-m", "llama_rocm_build", "--help"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0
        assert "llama.cpp ROCm builder" in result.stdout

    def test_module_version(self) -> None:
        """python -m llama_rocm_build --version should work."""
        result = subprocess.run(
            [sys.executable, "-m", "llama_rocm_build", "--version"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0
        assert __version__ in result.stdout
