"""
Package Manager Module
======================

Drives npm, yarn or pnpm as subprocesses:
- Detecting the client from lock files (walking up to a monorepo root)
- Installing a single package reference
- Reinstalling all dependencies of a pilet
- Running lifecycle scripts (upgrade hooks) through the shell

Failures are raised as ``DownstreamToolFailure`` (package manager) or
``HookFailure`` (hook scripts) carrying the command and its output.
"""

import subprocess
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Type, Union

from piletkit_common.config import get_settings
from piletkit_common.constants import LockFiles
from piletkit_common.errors import CommandError, DownstreamToolFailure, HookFailure
from piletkit_common.logger import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


class NpmClient(str, Enum):
    """Supported package manager clients."""

    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"


# ============================================================================
# Client Detection
# ============================================================================


def _find_file_upwards(root: PathLike, name: str) -> Optional[Path]:
    current = Path(root).absolute()
    for parent in [current] + list(current.parents):
        candidate = parent / name
        if candidate.is_file():
            return candidate
    return None


def detect_npm(root: PathLike) -> bool:
    return _find_file_upwards(root, LockFiles.NPM) is not None


def detect_yarn(root: PathLike) -> bool:
    return _find_file_upwards(root, LockFiles.YARN) is not None


def detect_pnpm(root: PathLike) -> bool:
    return _find_file_upwards(root, LockFiles.PNPM) is not None


def detect_client(root: PathLike, default: NpmClient = NpmClient.NPM) -> NpmClient:
    """
    Determine which package manager a project uses.

    The ``PILETKIT_NPM_CLIENT`` setting wins; otherwise the nearest lock
    file decides (pnpm, then yarn, then npm).

    Args:
        root: Project directory
        default: Client used when nothing is configured or detected

    Returns:
        NpmClient
    """
    configured = get_settings().npm_client
    if configured:
        return NpmClient(configured)
    if detect_pnpm(root):
        return NpmClient.PNPM
    if detect_yarn(root):
        return NpmClient.YARN
    if detect_npm(root):
        return NpmClient.NPM
    return default


# ============================================================================
# Command Arguments
# ============================================================================

INSTALL_PACKAGE_ARGS: Dict[NpmClient, List[str]] = {
    NpmClient.NPM: ["install", "{ref}", "--no-save", "--no-package-lock"],
    NpmClient.YARN: ["add", "{ref}", "--no-lockfile"],
    NpmClient.PNPM: ["add", "{ref}", "--no-lockfile"],
}
"""Install one reference without recording it; the manifest is patched separately."""

INSTALL_DEPENDENCIES_ARGS: Dict[NpmClient, List[str]] = {
    NpmClient.NPM: ["install", "--no-package-lock"],
    NpmClient.YARN: ["install", "--no-lockfile"],
    NpmClient.PNPM: ["install", "--no-lockfile"],
}


# ============================================================================
# Runner
# ============================================================================


class PackageManagerRunner:
    """
    Runs package manager commands for a pilet.

    Args:
        client: Client to use; detected per project when None
        timeout: Seconds before a command is aborted (None = no limit)

    Example:
        >>> runner = PackageManagerRunner()
        >>> runner.install_package("piral-base@2.0.0", Path("my-pilet"))
    """

    def __init__(
        self,
        client: Union[NpmClient, str, None] = None,
        timeout: Optional[float] = None,
    ):
        self.client = NpmClient(client) if client else None
        self.timeout = timeout if timeout is not None else get_settings().command_timeout

    def client_for(self, root: PathLike) -> NpmClient:
        return self.client or detect_client(root)

    def _run(
        self,
        command: Union[List[str], str],
        cwd: PathLike,
        description: str,
        error_cls: Type[CommandError],
        shell: bool = False,
    ) -> str:
        printable = command if isinstance(command, str) else " ".join(command)
        logger.debug(f"Running: {printable}", cwd=str(cwd))

        try:
            result = subprocess.run(
                command,
                cwd=str(cwd),
                shell=shell,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise error_cls(
                f"{description} failed: could not find '{printable.split()[0]}'. "
                f"Is it installed and on the PATH?",
                command=[printable] if shell else list(command),
            ) from e
        except subprocess.TimeoutExpired as e:
            raise error_cls(
                f"{description} timed out after {self.timeout} seconds",
                command=[printable] if shell else list(command),
            ) from e
        except subprocess.CalledProcessError as e:
            output = (e.stderr or e.stdout or "").strip()
            message = f"{description} failed (exit code {e.returncode})"
            if output:
                message += f":\n{output}"
            raise error_cls(
                message,
                command=[printable] if shell else list(command),
                exit_code=e.returncode,
                output=output,
            ) from e

        if result.stdout:
            logger.debug(result.stdout.strip())
        return result.stdout or ""

    def install_package(self, reference: str, root: PathLike) -> str:
        """
        Install a single package reference into ``root/node_modules``.

        Raises:
            DownstreamToolFailure: If the package manager fails
        """
        client = self.client_for(root)
        args = [arg.format(ref=reference) for arg in INSTALL_PACKAGE_ARGS[client]]
        return self._run(
            [client.value, *args],
            root,
            f"Installing {reference} with {client.value}",
            DownstreamToolFailure,
        )

    def install_dependencies(self, root: PathLike) -> str:
        """
        Reinstall all dependencies declared by the project at ``root``.

        Raises:
            DownstreamToolFailure: If the package manager fails
        """
        client = self.client_for(root)
        return self._run(
            [client.value, *INSTALL_DEPENDENCIES_ARGS[client]],
            root,
            f"Installing dependencies with {client.value}",
            DownstreamToolFailure,
        )

    def run_script(self, script: str, root: PathLike) -> str:
        """
        Run a shell script in ``root``.

        Raises:
            HookFailure: If the script exits with a non-zero status
        """
        return self._run(script, root, f'Script "{script}"', HookFailure, shell=True)


__all__ = [
    "NpmClient",
    "PackageManagerRunner",
    "INSTALL_PACKAGE_ARGS",
    "INSTALL_DEPENDENCIES_ARGS",
    "detect_client",
    "detect_npm",
    "detect_yarn",
    "detect_pnpm",
]
