"""
Package Reference Building
==========================

Turns a (name, version, source type) triple into the single argument
string a package manager install command accepts.
"""

from typing import Optional, Union

from piletkit_common.constants import DEFAULT_VERSION

from .models import PackageSpecifier, SourceType


def combine_package_ref(
    name: str,
    version: Optional[str],
    source_type: Union[SourceType, str],
) -> str:
    """
    Build the install argument for a package.

    Registry packages become ``name@version`` (``latest`` when no version is
    given). File and git references are already complete and returned as is.

    Args:
        name: Package name, absolute path or git URL
        version: Version or tag; ignored for file and git references
        source_type: How the package is sourced

    Returns:
        Package-manager-ready reference

    Examples:
        >>> combine_package_ref("foo", "1.0.0", SourceType.REGISTRY)
        'foo@1.0.0'
        >>> combine_package_ref("foo", None, "registry")
        'foo@latest'
        >>> combine_package_ref("/tmp/foo.tgz", "1.0.0", SourceType.FILE)
        '/tmp/foo.tgz'
    """
    return PackageSpecifier(
        name=name,
        version=version or DEFAULT_VERSION,
        had_explicit_version=version is not None,
        source_type=SourceType(source_type),
    ).to_reference()
