"""
Package Reference Handling
==========================

Parsing, reference building and version resolution for base packages.

Usage:
    from piletkit_sdk.packages import parse_package_specifier, VersionResolver

    spec = parse_package_specifier(cwd, "@foo/bar@^1.x")
    resolved = VersionResolver(cwd).resolve("piral-base", "^1.0.0", "2.0.0")
"""

from .models import PackageSpecifier, SourceType
from .reference import combine_package_ref
from .resolver import (
    Notice,
    NoticeLevel,
    ResolvedPackage,
    VersionResolver,
    resolve_current_package,
)
from .specifier import (
    PackageSpecifierParser,
    is_git_package,
    is_linked_package,
    is_local_package,
    make_git_url,
    parse_package_specifier,
    resolve_local_path,
    split_registry_name,
)

__all__ = [
    # Models
    "PackageSpecifier",
    "SourceType",
    # Parsing
    "PackageSpecifierParser",
    "parse_package_specifier",
    "is_local_package",
    "is_git_package",
    "is_linked_package",
    "make_git_url",
    "resolve_local_path",
    "split_registry_name",
    # References
    "combine_package_ref",
    # Resolution
    "Notice",
    "NoticeLevel",
    "ResolvedPackage",
    "VersionResolver",
    "resolve_current_package",
]
