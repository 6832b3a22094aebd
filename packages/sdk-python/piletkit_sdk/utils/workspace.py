"""
Workspace Utilities Module
==========================

Filesystem helpers for pilet projects:
- Validating an upgrade target directory
- Reading and writing JSON manifests
- Detecting whether the pilet lives inside a monorepo
- Clearing the bundler cache after an upgrade
"""

import json
import shutil
from pathlib import Path
from typing import Any, Optional, Tuple, Union

import yaml

from piletkit_common.constants import ManifestKeys, MonorepoFiles, Folders
from piletkit_common.errors import ValidationError
from piletkit_common.logger import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


# ============================================================================
# Manifest I/O
# ============================================================================


def check_existing_directory(root: PathLike) -> bool:
    """
    Check that ``root`` is a directory containing a package.json.

    Args:
        root: Candidate pilet directory

    Returns:
        True if the directory exists and holds a manifest
    """
    root = Path(root)
    return root.is_dir() and (root / ManifestKeys.FILE_NAME).is_file()


def read_json(root: PathLike, name: str) -> Any:
    """
    Read a JSON file.

    Args:
        root: Directory of the file
        name: File name

    Returns:
        Parsed content

    Raises:
        ValidationError: If the file is not valid JSON
    """
    path = Path(root) / name
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {path}: {e}") from e


def write_json(root: PathLike, name: str, data: Any) -> Path:
    """Write ``data`` as JSON with two-space indentation and a trailing newline."""
    path = Path(root) / name
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path


# ============================================================================
# Monorepo Detection
# ============================================================================


def _monorepo_kind(directory: Path) -> Optional[str]:
    if (directory / MonorepoFiles.LERNA).is_file():
        return "lerna"

    pnpm_workspace = directory / MonorepoFiles.PNPM_WORKSPACE
    if pnpm_workspace.is_file():
        try:
            content = yaml.safe_load(pnpm_workspace.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            logger.warning(f"Ignoring unreadable {pnpm_workspace}: {e}")
            content = {}
        if isinstance(content, dict) and content.get("packages"):
            return "pnpm"

    manifest = directory / ManifestKeys.FILE_NAME
    if manifest.is_file():
        try:
            data = json.loads(manifest.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.debug(f"Skipping unreadable {manifest} during monorepo detection")
            return None
        if isinstance(data, dict) and data.get(ManifestKeys.WORKSPACES):
            return "workspaces"

    return None


def find_workspace_root(start_path: Optional[PathLike] = None) -> Optional[Tuple[Path, str]]:
    """
    Find the monorepo enclosing a pilet.

    Walks up the directory tree from ``start_path`` looking for a
    ``lerna.json``, a ``pnpm-workspace.yaml`` listing packages, or a
    ``package.json`` declaring ``workspaces``.

    Args:
        start_path: Starting directory (defaults to current working directory)

    Returns:
        Tuple of (workspace root, kind) or None if not inside a monorepo
    """
    current = Path(start_path) if start_path is not None else Path.cwd()
    current = current.absolute()

    for parent in [current] + list(current.parents):
        kind = _monorepo_kind(parent)
        if kind:
            return parent, kind

    return None


def detect_monorepo(root: PathLike) -> Optional[str]:
    """
    Detect the monorepo flavour a pilet belongs to.

    Returns:
        "lerna", "pnpm", "workspaces" or None
    """
    found = find_workspace_root(root)
    return found[1] if found else None


# ============================================================================
# Cache
# ============================================================================


def clear_cache(root: PathLike, cache_dir_name: str = Folders.CACHE) -> bool:
    """
    Remove the bundler cache below ``node_modules``.

    Args:
        root: Pilet directory
        cache_dir_name: Cache folder name inside node_modules

    Returns:
        True if a cache folder was removed
    """
    cache_dir = Path(root) / Folders.NODE_MODULES / cache_dir_name
    if not cache_dir.is_dir():
        logger.debug(f"No cache to clear at {cache_dir}")
        return False
    shutil.rmtree(cache_dir)
    logger.debug(f"Cleared cache at {cache_dir}")
    return True
