"""Shared pytest fixtures for integration and unit tests."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Callable

import pytest

from safepaths.presets.loader import PresetLoader, default_loader
from safepaths.registry.paths import PathRegistry

PROJECT_ROOT = Path(__file__).resolve().parent.parent

CliRunner = Callable[..., subprocess.CompletedProcess]


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Expose the repository root path to tests."""

    return PROJECT_ROOT


@pytest.fixture()
def loader() -> PresetLoader:
    """Provide an isolated loader with the bundled presets."""

    return default_loader()


@pytest.fixture()
def registry(loader: PresetLoader) -> PathRegistry:
    """Registry rooted at the scenario base directory with default paths."""

    return PathRegistry("/var/www/app", loader=loader)


@pytest.fixture(name="run_cli")
def _run_cli(tmp_path: Path) -> CliRunner:
    """Run the safepaths CLI in a subprocess and capture its output."""

    def run(*cli_args: str, env: dict[str, str] | None = None):
        process_env = {
            key: value
            for key, value in os.environ.items()
            if not key.startswith("SAFEPATHS_")
        }
        process_env["PYTHONPATH"] = str(PROJECT_ROOT)
        process_env.update(env or {})
        return subprocess.run(
            [sys.executable, "-m", "safepaths.cli", *cli_args],
            cwd=tmp_path,
            env=process_env,
            capture_output=True,
            text=True,
            timeout=30,
            check=False,
        )

    return run
