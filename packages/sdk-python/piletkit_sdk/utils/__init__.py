"""Utility modules for piletkit SDK."""

from .package_manager import (
    NpmClient,
    PackageManagerRunner,
    detect_client,
    detect_npm,
    detect_pnpm,
    detect_yarn,
)
from .workspace import (
    check_existing_directory,
    clear_cache,
    detect_monorepo,
    find_workspace_root,
    read_json,
    write_json,
)

__all__ = [
    "NpmClient",
    "PackageManagerRunner",
    "detect_client",
    "detect_npm",
    "detect_pnpm",
    "detect_yarn",
    "check_existing_directory",
    "clear_cache",
    "detect_monorepo",
    "find_workspace_root",
    "read_json",
    "write_json",
]
