"""Pytest configuration and fixtures for schema tests.

This conftest.py ensures tests work for both developers (editable install)
and users (pip installed package).
"""
import sys
import pytest
from pathlib import Path


def pytest_configure(config):
    """Configure pytest with custom markers and path setup."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture(scope="session", autouse=True)
def setup_test_path():
    """Ensure the package root is in the Python path.

    This makes the package importable whether tests are run from:
    - The package directory (packages/schema)
    - The project root
    - Or after pip install
    """
    package_root = Path(__file__).parent.parent

    # Add package root to path for local development
    package_root_str = str(package_root)
    if package_root_str not in sys.path:
        sys.path.insert(0, package_root_str)

    yield


@pytest.fixture
def minimal_pilet():
    """Smallest manifest the upgrade accepts."""
    return {
        "name": "my-pilet",
        "version": "1.0.0",
        "devDependencies": {"my-app": "^1.0.0"},
        "piral": {"name": "my-app"},
    }


@pytest.fixture
def full_base_package():
    """Base package metadata with every pilets field set."""
    return {
        "name": "my-app",
        "version": "2.0.0",
        "pilets": {
            "files": ["tsconfig.json", {"from": "src/mocks", "to": "mocks", "deep": False}],
            "scripts": {"start": "pilet debug"},
            "devDependencies": {"typescript": "^5.0.0"},
            "externals": ["react", "react-dom"],
            "preUpgrade": "echo pre",
            "postUpgrade": "echo post",
        },
    }
