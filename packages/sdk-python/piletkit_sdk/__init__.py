"""piletkit SDK - upgrade the base package of pilets.

This package provides tools for:
- Parsing and classifying package references (registry, local file, git)
- Resolving what to install when upgrading a pilet's base package
- Driving npm, yarn or pnpm
- Keeping template-managed files in sync with the base package
- Orchestrating the complete upgrade

Example:
    >>> from piletkit_sdk import upgrade_pilet, parse_package_specifier
    >>> parse_package_specifier(".", "@foo/bar@^1.x").version
    '^1.x'
    >>> result = upgrade_pilet(version="2.0.0")

Package Structure:
    piletkit_sdk/
    ├── packages/       - Specifier parsing, reference building, version resolution
    ├── templates/      - Template file reconciliation
    ├── utils/          - Shared utilities (workspace, package manager)
    ├── manifest.py     - Reading and patching pilet manifests
    └── upgrade.py      - Upgrade orchestration
"""

# Package references
from .packages import (
    Notice,
    NoticeLevel,
    PackageSpecifier,
    PackageSpecifierParser,
    ResolvedPackage,
    SourceType,
    VersionResolver,
    combine_package_ref,
    is_git_package,
    is_linked_package,
    is_local_package,
    make_git_url,
    parse_package_specifier,
    resolve_current_package,
)

# Manifests
from .manifest import (
    UpgradeHooks,
    patch_pilet_manifest,
    read_base_package_info,
    read_pilet_manifest,
    read_upgrade_hooks,
)

# Templates
from .templates import ReconcileReport, TemplateReconciler

# Utilities
from .utils import (
    NpmClient,
    PackageManagerRunner,
    check_existing_directory,
    clear_cache,
    detect_client,
    detect_monorepo,
    find_workspace_root,
)

# Upgrade
from .upgrade import (
    UpgradeContext,
    UpgradeOptions,
    UpgradeOrchestrator,
    UpgradeResult,
    UpgradeStage,
    upgrade_pilet,
)

__version__ = "0.1.0"

__all__ = [
    # Package references
    "Notice",
    "NoticeLevel",
    "PackageSpecifier",
    "PackageSpecifierParser",
    "ResolvedPackage",
    "SourceType",
    "VersionResolver",
    "combine_package_ref",
    "is_git_package",
    "is_linked_package",
    "is_local_package",
    "make_git_url",
    "parse_package_specifier",
    "resolve_current_package",
    # Manifests
    "UpgradeHooks",
    "patch_pilet_manifest",
    "read_base_package_info",
    "read_pilet_manifest",
    "read_upgrade_hooks",
    # Templates
    "ReconcileReport",
    "TemplateReconciler",
    # Utilities
    "NpmClient",
    "PackageManagerRunner",
    "check_existing_directory",
    "clear_cache",
    "detect_client",
    "detect_monorepo",
    "find_workspace_root",
    # Upgrade
    "UpgradeContext",
    "UpgradeOptions",
    "UpgradeOrchestrator",
    "UpgradeResult",
    "UpgradeStage",
    "upgrade_pilet",
]
