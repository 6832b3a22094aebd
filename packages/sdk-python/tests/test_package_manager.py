"""
Tests for the package manager runner and workspace utilities.

Subprocesses are never spawned; ``subprocess.run`` is patched.
"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from piletkit_common.config import clear_settings_cache
from piletkit_common.errors import DownstreamToolFailure, HookFailure, ValidationError
from piletkit_sdk.utils import (
    NpmClient,
    PackageManagerRunner,
    check_existing_directory,
    clear_cache,
    detect_client,
    detect_monorepo,
    find_workspace_root,
    read_json,
    write_json,
)

RUN = "piletkit_sdk.utils.package_manager.subprocess.run"


def _completed(stdout=""):
    return MagicMock(returncode=0, stdout=stdout, stderr="")


# ============================================================================
# Client Detection
# ============================================================================


class TestDetectClient:
    def test_defaults_to_npm(self, tmp_path):
        assert detect_client(tmp_path) == NpmClient.NPM

    @pytest.mark.parametrize(
        "lock_file,client",
        [
            ("package-lock.json", NpmClient.NPM),
            ("yarn.lock", NpmClient.YARN),
            ("pnpm-lock.yaml", NpmClient.PNPM),
        ],
    )
    def test_lock_file(self, tmp_path, lock_file, client):
        (tmp_path / lock_file).write_text("")
        assert detect_client(tmp_path) == client

    def test_lock_file_in_parent(self, tmp_path):
        (tmp_path / "yarn.lock").write_text("")
        pilet = tmp_path / "packages" / "my-pilet"
        pilet.mkdir(parents=True)
        assert detect_client(pilet) == NpmClient.YARN

    def test_setting_wins(self, tmp_path, monkeypatch):
        (tmp_path / "yarn.lock").write_text("")
        monkeypatch.setenv("PILETKIT_NPM_CLIENT", "pnpm")
        clear_settings_cache()
        assert detect_client(tmp_path) == NpmClient.PNPM


# ============================================================================
# Runner
# ============================================================================


class TestPackageManagerRunner:
    def test_install_package_npm(self, tmp_path):
        runner = PackageManagerRunner(client="npm")
        with patch(RUN, return_value=_completed()) as run:
            runner.install_package("my-app@2.0.0", tmp_path)
        args, kwargs = run.call_args
        assert args[0] == ["npm", "install", "my-app@2.0.0", "--no-save", "--no-package-lock"]
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["check"] is True
        assert kwargs["shell"] is False

    def test_install_package_yarn(self, tmp_path):
        runner = PackageManagerRunner(client=NpmClient.YARN)
        with patch(RUN, return_value=_completed()) as run:
            runner.install_package("/tmp/base.tgz", tmp_path)
        assert run.call_args[0][0] == ["yarn", "add", "/tmp/base.tgz", "--no-lockfile"]

    def test_install_dependencies_detects_client(self, tmp_path):
        (tmp_path / "pnpm-lock.yaml").write_text("")
        runner = PackageManagerRunner()
        with patch(RUN, return_value=_completed()) as run:
            runner.install_dependencies(tmp_path)
        assert run.call_args[0][0] == ["pnpm", "install", "--no-lockfile"]

    def test_failure_is_wrapped(self, tmp_path):
        runner = PackageManagerRunner(client="npm")
        error = subprocess.CalledProcessError(1, ["npm", "install"], output="", stderr="E404 not found")
        with patch(RUN, side_effect=error):
            with pytest.raises(DownstreamToolFailure) as exc_info:
                runner.install_package("my-app@99.0.0", tmp_path)
        assert exc_info.value.exit_code == 1
        assert "E404" in exc_info.value.message
        assert exc_info.value.command[0] == "npm"

    def test_missing_executable(self, tmp_path):
        runner = PackageManagerRunner(client="pnpm")
        with patch(RUN, side_effect=FileNotFoundError("pnpm")):
            with pytest.raises(DownstreamToolFailure) as exc_info:
                runner.install_dependencies(tmp_path)
        assert "pnpm" in exc_info.value.message
        assert exc_info.value.exit_code is None

    def test_timeout(self, tmp_path):
        runner = PackageManagerRunner(client="npm", timeout=5)
        with patch(RUN, side_effect=subprocess.TimeoutExpired(["npm"], 5)):
            with pytest.raises(DownstreamToolFailure, match="timed out"):
                runner.install_dependencies(tmp_path)

    def test_run_script_uses_shell(self, tmp_path):
        runner = PackageManagerRunner(client="npm")
        with patch(RUN, return_value=_completed("done")) as run:
            assert runner.run_script("echo hello", tmp_path) == "done"
        args, kwargs = run.call_args
        assert args[0] == "echo hello"
        assert kwargs["shell"] is True

    def test_failing_script_raises_hook_failure(self, tmp_path):
        runner = PackageManagerRunner(client="npm")
        error = subprocess.CalledProcessError(2, "exit 2", output="", stderr="")
        with patch(RUN, side_effect=error):
            with pytest.raises(HookFailure) as exc_info:
                runner.run_script("exit 2", tmp_path)
        assert exc_info.value.exit_code == 2
        assert exc_info.value.command == ["exit 2"]

    def test_unknown_client_rejected(self):
        with pytest.raises(ValueError):
            PackageManagerRunner(client="bower")


# ============================================================================
# Workspace Utilities
# ============================================================================


class TestWorkspace:
    def test_check_existing_directory(self, tmp_path):
        assert check_existing_directory(tmp_path) is False
        (tmp_path / "package.json").write_text("{}")
        assert check_existing_directory(tmp_path) is True
        assert check_existing_directory(tmp_path / "missing") is False

    def test_write_json_format(self, tmp_path):
        write_json(tmp_path, "package.json", {"name": "x", "piral": {"name": "y"}})
        text = (tmp_path / "package.json").read_text()
        assert text.endswith("}\n")
        assert '\n  "name": "x"' in text
        assert read_json(tmp_path, "package.json")["piral"]["name"] == "y"

    def test_read_invalid_json(self, tmp_path):
        (tmp_path / "package.json").write_text("{ nope")
        with pytest.raises(ValidationError):
            read_json(tmp_path, "package.json")

    def test_no_monorepo(self, tmp_path):
        (tmp_path / "package.json").write_text('{"name": "solo"}')
        assert detect_monorepo(tmp_path) is None

    def test_lerna(self, tmp_path):
        (tmp_path / "lerna.json").write_text("{}")
        pilet = tmp_path / "packages" / "my-pilet"
        pilet.mkdir(parents=True)
        assert detect_monorepo(pilet) == "lerna"

    def test_npm_workspaces(self, tmp_path):
        (tmp_path / "package.json").write_text('{"workspaces": ["packages/*"]}')
        pilet = tmp_path / "packages" / "my-pilet"
        pilet.mkdir(parents=True)
        (pilet / "package.json").write_text('{"name": "my-pilet"}')
        assert find_workspace_root(pilet) == (tmp_path, "workspaces")

    def test_pnpm_workspace(self, tmp_path):
        (tmp_path / "pnpm-workspace.yaml").write_text("packages:\n  - 'pilets/*'\n")
        pilet = tmp_path / "pilets" / "my-pilet"
        pilet.mkdir(parents=True)
        assert detect_monorepo(pilet) == "pnpm"

    def test_empty_pnpm_workspace_is_ignored(self, tmp_path):
        (tmp_path / "pnpm-workspace.yaml").write_text("")
        assert detect_monorepo(tmp_path) is None

    def test_clear_cache(self, tmp_path):
        cache = tmp_path / "node_modules" / ".cache" / "parcel"
        cache.mkdir(parents=True)
        (cache / "entry").write_text("stale")
        assert clear_cache(tmp_path) is True
        assert not (tmp_path / "node_modules" / ".cache").exists()
        assert (tmp_path / "node_modules").exists()
        assert clear_cache(tmp_path) is False
