"""
Package Specifier Models
========================

Typed descriptors produced by the specifier parser and consumed by the
reference builder and version resolver.
"""

from dataclasses import dataclass
from enum import Enum

from piletkit_common.constants import DEFAULT_VERSION


class SourceType(str, Enum):
    """Where a package comes from."""

    REGISTRY = "registry"  # npm registry (name, name@version, name@tag)
    FILE = "file"  # local tarball or directory
    GIT = "git"  # git+ssh:// or git+https:// URL


@dataclass(frozen=True)
class PackageSpecifier:
    """
    A classified package reference.

    Attributes:
        name: Package name; absolute path for ``FILE``; canonical git URL for ``GIT``
        version: Requested version or tag ("latest" when none was given)
        had_explicit_version: Whether the raw input carried an ``@version`` suffix
        source_type: Classification of the reference
    """

    name: str
    version: str = DEFAULT_VERSION
    had_explicit_version: bool = False
    source_type: SourceType = SourceType.REGISTRY

    @property
    def is_local(self) -> bool:
        return self.source_type == SourceType.FILE

    @property
    def is_git(self) -> bool:
        return self.source_type == SourceType.GIT

    def to_reference(self) -> str:
        """
        Canonical package-manager argument for this specifier.

        Registry packages become ``name@version``; file and git references are
        already complete and returned as is.
        """
        if self.source_type == SourceType.REGISTRY:
            return f"{self.name}@{self.version or DEFAULT_VERSION}"
        return self.name
