"""
Package Specifier Parsing
=========================

Classifies a raw package reference string and splits it into a typed
``PackageSpecifier``. Handles:
- Registry names: foo, foo@1.2.3, foo@next, @scope/foo, @scope/foo@^1.x
- Local paths: /abs/path, ./rel, ../rel, ~/home, file:..., *.tgz, existing paths
- Git URLs: git+ssh://..., git+https://..., ssh://...git, https://...git,
  git@host:org/repo.git, github:org/repo

Classification runs an ordered list of predicates (local, then git, then
registry); the first match wins and every string matches exactly one.
"""

import os
import re
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from piletkit_common.constants import DEFAULT_VERSION, Prefixes

from .models import PackageSpecifier, SourceType

PathLike = Union[str, Path]

_WINDOWS_DRIVE = re.compile(r"^[a-zA-Z]:[\\/]")
_GIT_URL = re.compile(r"^(https?|ssh)://.+\.git(#.*)?/?$")
_SCP_GIT_URL = re.compile(r"^(?P<user>[\w.-]+)@(?P<host>[\w.-]+):(?P<path>[^/].*\.git)(?P<ref>#.*)?$")


# ============================================================================
# Classifier Predicates
# ============================================================================


def _strip_file_prefix(full_name: str) -> str:
    if full_name.startswith("file://"):
        return full_name[len("file://") :]
    if full_name.startswith(Prefixes.FILE):
        return full_name[len(Prefixes.FILE) :]
    return full_name


def resolve_local_path(base_dir: PathLike, full_name: str) -> str:
    """
    Resolve a local package reference against ``base_dir``.

    A ``file:`` prefix is removed and ``~`` is expanded before resolving.
    The result is absolute and normalized; symlinks are not followed.
    """
    path = os.path.expanduser(_strip_file_prefix(full_name))
    return os.path.abspath(os.path.join(os.fspath(base_dir), path))


def _exists_on_disk(base_dir: PathLike, full_name: str) -> bool:
    try:
        return Path(resolve_local_path(base_dir, full_name)).exists()
    except (OSError, ValueError):
        return False


def is_local_package(base_dir: PathLike, full_name: Optional[str]) -> bool:
    """
    Check whether a reference points to a local file or directory.

    Args:
        base_dir: Directory relative references are resolved against
        full_name: Raw reference (may be None)

    Returns:
        True for path-shaped references, tarballs and existing paths
    """
    if not full_name:
        return False
    if "://" in full_name and not full_name.startswith(Prefixes.FILE):
        return False
    if full_name in (".", ".."):
        return True
    if full_name.startswith(Prefixes.PATHS) or _WINDOWS_DRIVE.match(full_name):
        return True
    if full_name.endswith(Prefixes.TARBALL_SUFFIXES):
        return True
    return _exists_on_disk(base_dir, full_name)


def is_git_package(full_name: Optional[str]) -> bool:
    """Check whether a reference is a git repository URL."""
    if not full_name:
        return False
    if full_name.startswith((Prefixes.GIT, Prefixes.GIT_PROTOCOL) + Prefixes.HOSTED_GIT):
        return True
    return bool(_GIT_URL.match(full_name) or _SCP_GIT_URL.match(full_name))


def make_git_url(full_name: str) -> str:
    """
    Normalize a git reference to the ``git+<scheme>://`` form npm expects.

    Idempotent: already canonical URLs and hosted shorthands such as
    ``github:org/repo`` are returned unchanged.

    Examples:
        >>> make_git_url("ssh://host/repo.git")
        'git+ssh://host/repo.git'
        >>> make_git_url("git@github.com:org/repo.git")
        'git+ssh://git@github.com/org/repo.git'
    """
    if full_name.startswith((Prefixes.GIT, Prefixes.GIT_PROTOCOL) + Prefixes.HOSTED_GIT):
        return full_name
    scp = _SCP_GIT_URL.match(full_name)
    if scp:
        ref = scp.group("ref") or ""
        return f"{Prefixes.GIT}ssh://{scp.group('user')}@{scp.group('host')}/{scp.group('path')}{ref}"
    return f"{Prefixes.GIT}{full_name}"


def split_registry_name(full_name: str) -> Tuple[str, Optional[str]]:
    """
    Split ``name@version`` at the last ``@`` that is not the scope marker.

    Returns:
        Tuple of (name, version or None when no suffix was given)
    """
    index = full_name.rfind("@")
    if index <= 0:
        return full_name, None
    return full_name[:index], full_name[index + 1 :]


# ============================================================================
# Parser
# ============================================================================


def _as_file(base_dir: PathLike, full_name: str) -> PackageSpecifier:
    return PackageSpecifier(
        name=resolve_local_path(base_dir, full_name),
        version=DEFAULT_VERSION,
        had_explicit_version=False,
        source_type=SourceType.FILE,
    )


def _as_git(base_dir: PathLike, full_name: str) -> PackageSpecifier:
    return PackageSpecifier(
        name=make_git_url(full_name),
        version=DEFAULT_VERSION,
        had_explicit_version=False,
        source_type=SourceType.GIT,
    )


def _as_registry(base_dir: PathLike, full_name: str) -> PackageSpecifier:
    name, version = split_registry_name(full_name)
    return PackageSpecifier(
        name=name,
        version=version or DEFAULT_VERSION,
        had_explicit_version=version is not None,
        source_type=SourceType.REGISTRY,
    )


Classifier = Tuple[
    Callable[[PathLike, str], bool],
    Callable[[PathLike, str], PackageSpecifier],
]

CLASSIFIERS: List[Classifier] = [
    (is_local_package, _as_file),
    (lambda base_dir, full_name: is_git_package(full_name), _as_git),
    (lambda base_dir, full_name: True, _as_registry),
]
"""Ordered (predicate, builder) pairs; the registry entry matches everything."""


def parse_package_specifier(base_dir: PathLike, full_name: Optional[str]) -> PackageSpecifier:
    """
    Parse a raw package reference. Never fails.

    Args:
        base_dir: Directory relative paths are resolved against
        full_name: Raw reference, e.g. "@foo/bar@^1.x" or "../foo/bar"

    Returns:
        PackageSpecifier describing the reference

    Examples:
        >>> parse_package_specifier("/home/yolo", "@foo/bar@^1.x")
        PackageSpecifier(name='@foo/bar', version='^1.x', had_explicit_version=True, ...)
        >>> parse_package_specifier("/home/yolo", "../foo/bar").name
        '/home/foo/bar'
    """
    full_name = (full_name or "").strip()
    for predicate, build in CLASSIFIERS:
        if predicate(base_dir, full_name):
            return build(base_dir, full_name)
    raise AssertionError("the registry classifier matches every input")


class PackageSpecifierParser:
    """
    Parser bound to a base directory.

    Example:
        >>> parser = PackageSpecifierParser("/home/yolo")
        >>> parser.parse("ssh://foo-bar.com/foo.git").name
        'git+ssh://foo-bar.com/foo.git'
    """

    def __init__(self, base_dir: Optional[PathLike] = None):
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()

    def parse(self, full_name: Optional[str]) -> PackageSpecifier:
        return parse_package_specifier(self.base_dir, full_name)

    def source_type(self, full_name: Optional[str]) -> SourceType:
        return self.parse(full_name).source_type


def is_linked_package(
    name: str,
    source_type: Union[SourceType, str],
    had_version: bool,
    target: Optional[PathLike] = None,
) -> bool:
    """
    Check whether a registry package is currently linked (``npm link``).

    Only registry references without an explicit version can be linked;
    the link shows up as a symlink in the target's ``node_modules``.
    """
    if SourceType(source_type) != SourceType.REGISTRY or had_version or not target:
        return False
    return (Path(target) / "node_modules" / name).is_symlink()
