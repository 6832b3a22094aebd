"""
Version Resolution
==================

Decides which reference to install when upgrading a pilet's base package,
and which version string to record in the pilet's manifest afterwards.

Resolution table (first matching row wins):

    requested is local   -> file reference, path resolved against base_dir
    requested is git     -> canonical git URL
    otherwise            -> registry "name@requested"; if the currently
                            recorded version is a "file:" reference a
                            warning notice is emitted first

The resolver is pure: diagnostics are returned as ``Notice`` values and
the caller decides how to surface them.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from piletkit_common.constants import DEFAULT_VERSION, Prefixes

from .models import SourceType
from .reference import combine_package_ref
from .specifier import is_git_package, is_local_package, make_git_url, resolve_local_path


class NoticeLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class Notice:
    """A diagnostic produced while resolving."""

    level: NoticeLevel
    message: str


@dataclass(frozen=True)
class ResolvedPackage:
    """
    Result of resolving the upgrade target.

    Attributes:
        reference: Argument handed to the package manager's install command
        effective_version: Version to record in devDependencies; None means
            "record what actually got installed"
        source_type: How the new base package is sourced
        notices: Diagnostics for the caller to log
    """

    reference: str
    effective_version: Optional[str]
    source_type: SourceType
    notices: Tuple[Notice, ...] = ()


class VersionResolver:
    """
    Resolves upgrade targets relative to a base directory.

    Example:
        >>> resolver = VersionResolver("/home/me/my-pilet")
        >>> resolver.resolve("piral-base", "^1.0.0", "2.0.0").reference
        'piral-base@2.0.0'
    """

    def __init__(self, base_dir: Union[str, Path, None] = None):
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()

    def resolve(
        self,
        source_name: str,
        current_version: Optional[str],
        requested_version: Optional[str],
        is_requested_local: Optional[bool] = None,
    ) -> ResolvedPackage:
        """
        Resolve the install reference for an upgrade.

        Args:
            source_name: Name of the base package (from the pilet manifest)
            current_version: Version currently recorded in devDependencies
            requested_version: Version, tag, path or git URL to upgrade to
            is_requested_local: Precomputed locality of ``requested_version``;
                detected when None

        Returns:
            ResolvedPackage
        """
        requested = requested_version or DEFAULT_VERSION
        if is_requested_local is None:
            is_requested_local = is_local_package(self.base_dir, requested)

        if is_requested_local:
            path = resolve_local_path(self.base_dir, requested)
            return ResolvedPackage(
                reference=combine_package_ref(path, current_version, SourceType.FILE),
                effective_version=requested,
                source_type=SourceType.FILE,
            )

        if is_git_package(requested):
            url = make_git_url(requested)
            return ResolvedPackage(
                reference=combine_package_ref(url, None, SourceType.GIT),
                effective_version=url,
                source_type=SourceType.GIT,
            )

        notices: List[Notice] = []
        if current_version and current_version.startswith(Prefixes.FILE):
            notices.append(
                Notice(
                    NoticeLevel.WARNING,
                    f'The base package "{source_name}" is currently referenced from '
                    f'"{current_version}", but the upgrade target "{requested}" is not a local file.',
                )
            )
            notices.append(
                Notice(
                    NoticeLevel.INFO,
                    f'Resolving "{source_name}@{requested}" from the registry instead.',
                )
            )

        return ResolvedPackage(
            reference=combine_package_ref(source_name, requested, SourceType.REGISTRY),
            effective_version=None,
            source_type=SourceType.REGISTRY,
            notices=tuple(notices),
        )


def resolve_current_package(
    source_name: str,
    current_version: Optional[str],
    requested_version: Optional[str],
    is_requested_local: Optional[bool] = None,
    base_dir: Union[str, Path] = ".",
) -> ResolvedPackage:
    """
    Convenience wrapper around ``VersionResolver.resolve``.

    Example:
        >>> resolve_current_package("piral-base", "file:../x.tgz", "latest").notices[0].level
        <NoticeLevel.WARNING: 'warning'>
    """
    return VersionResolver(base_dir).resolve(
        source_name, current_version, requested_version, is_requested_local
    )
