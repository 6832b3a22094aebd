"""Pytest configuration and fixtures for SDK tests.

This conftest.py ensures tests work for both developers (editable install)
and users (pip installed package).
"""
import json
import sys
import pytest
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from piletkit_common.config import clear_settings_cache
from piletkit_common.errors import DownstreamToolFailure, HookFailure


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
    """Ensure the package root and tests directory are in the Python path.

    This makes fixtures importable whether tests are run from:
    - The package directory (packages/sdk-python)
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


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep PILETKIT_* variables and .env files of the host out of tests."""
    import os
    for key in list(os.environ):
        if key.startswith("PILETKIT_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


# ============================================================================
# Project Builders
# ============================================================================


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def install_base(
    root: Path,
    name: str = "my-app",
    version: str = "1.0.0",
    pilets: Optional[Dict[str, Any]] = None,
    files: Optional[Dict[str, str]] = None,
) -> Path:
    """Simulate an installed base package in root/node_modules."""
    package_dir = root / "node_modules" / name
    manifest: Dict[str, Any] = {"name": name, "version": version}
    if pilets is not None:
        manifest["pilets"] = pilets
    write_json(package_dir / "package.json", manifest)
    for relative, content in (files or {}).items():
        target = package_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return package_dir


@pytest.fixture
def pilet_project(tmp_path):
    """Factory creating a pilet directory with the given manifest."""

    def _create(
        manifest: Optional[Dict[str, Any]] = None,
        name: str = "my-pilet",
    ) -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        write_json(
            root / "package.json",
            manifest
            if manifest is not None
            else {
                "name": name,
                "version": "1.0.0",
                "devDependencies": {"my-app": "^1.0.0"},
                "piral": {"name": "my-app"},
            },
        )
        return root

    return _create


# ============================================================================
# Fake Package Manager
# ============================================================================


class FakeRunner:
    """
    Records package manager calls instead of spawning processes.

    Args:
        on_install: Called with (reference, root) to simulate an installation
        fail_on: Operation names ("install_package", "install_dependencies",
            or a script string) that should fail
    """

    def __init__(
        self,
        on_install: Optional[Callable[[str, Path], None]] = None,
        fail_on: Optional[List[str]] = None,
    ):
        self.calls: List[tuple] = []
        self.on_install = on_install
        self.fail_on = fail_on or []

    def install_package(self, reference: str, root: Path) -> str:
        self.calls.append(("install_package", reference, Path(root)))
        if "install_package" in self.fail_on:
            raise DownstreamToolFailure("install failed", command=["npm", "install", reference], exit_code=1)
        if self.on_install:
            self.on_install(reference, Path(root))
        return ""

    def install_dependencies(self, root: Path) -> str:
        self.calls.append(("install_dependencies", Path(root)))
        if "install_dependencies" in self.fail_on:
            raise DownstreamToolFailure("install failed", command=["npm", "install"], exit_code=1)
        return ""

    def run_script(self, script: str, root: Path) -> str:
        self.calls.append(("run_script", script, Path(root)))
        if script in self.fail_on:
            raise HookFailure(f'Script "{script}" failed', command=[script], exit_code=1)
        return ""

    @property
    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def fake_runner_factory():
    return FakeRunner


@pytest.fixture
def base_installer():
    return install_base


@pytest.fixture
def json_reader():
    return read_json
