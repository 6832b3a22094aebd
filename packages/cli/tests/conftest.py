"""Pytest configuration and fixtures for CLI tests.

This conftest.py ensures tests work for both developers (editable install)
and users (pip installed package).
"""
import sys
import os
import json
import pytest
from pathlib import Path
from typer.testing import CliRunner

from piletkit_common.config import clear_settings_cache


def pytest_configure(config):
    """Configure pytest with custom markers and path setup."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


@pytest.fixture(scope="session", autouse=True)
def setup_test_path():
    """Ensure the package root is in the Python path.

    This makes the package importable whether tests are run from:
    - The package directory (packages/cli)
    - The project root
    - Or after pip install
    """
    package_root = Path(__file__).parent.parent
    tests_root = Path(__file__).parent

    # Add package root to path for local development
    package_root_str = str(package_root)
    if package_root_str not in sys.path:
        sys.path.insert(0, package_root_str)

    # Add tests directory for fixture imports
    tests_root_str = str(tests_root)
    if tests_root_str not in sys.path:
        sys.path.insert(0, tests_root_str)

    yield


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def pilet_dir(tmp_path, monkeypatch):
    """A pilet based on "my-app" 1.0.0, used as the working directory."""
    for key in list(os.environ):
        if key.startswith("PILETKIT_"):
            monkeypatch.delenv(key)
    clear_settings_cache()

    root = tmp_path / "my-pilet"
    root.mkdir()
    (root / "package.json").write_text(json.dumps({
        "name": "my-pilet",
        "version": "1.0.0",
        "devDependencies": {"my-app": "^1.0.0"},
        "piral": {"name": "my-app", "files": ["tsconfig.json"]},
    }, indent=2))
    monkeypatch.chdir(root)
    yield root
    clear_settings_cache()


@pytest.fixture
def fake_npm(monkeypatch):
    """Patch subprocess.run in the runner; installs write my-app 2.0.0 to node_modules."""
    calls = []

    class Completed:
        returncode = 0
        stdout = ""
        stderr = ""

    def fake_run(command, cwd=None, **kwargs):
        calls.append(command)
        if isinstance(command, list) and command[1] in ("install", "add") and len(command) > 2 \
                and not command[2].startswith("--"):
            package_dir = Path(cwd) / "node_modules" / "my-app"
            package_dir.mkdir(parents=True, exist_ok=True)
            (package_dir / "package.json").write_text(json.dumps({
                "name": "my-app",
                "version": "2.0.0",
                "pilets": {"files": ["tsconfig.json"]},
            }))
            (package_dir / "tsconfig.json").write_text('{"v": 2}')
        return Completed()

    monkeypatch.setattr("piletkit_sdk.utils.package_manager.subprocess.run", fake_run)
    return calls
