"""
Pilet Manifest Operations
=========================

Reads the pilet's package.json and the installed base package's metadata,
and patches the pilet's manifest after its base package was upgraded.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from piletkit_common.constants import Folders, ManifestKeys
from piletkit_common.logger import get_logger
from piletkit_schema import (
    BasePackageInfo,
    PiletManifest,
    TemplateFile,
    parse_base_package_info,
    parse_pilet_manifest,
)

from .utils.workspace import read_json, write_json

logger = get_logger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class UpgradeHooks:
    """Shell scripts run around the installation of the new base package."""

    pre_upgrade: Optional[str] = None
    post_upgrade: Optional[str] = None

    @classmethod
    def from_base_info(cls, info: Optional[BasePackageInfo]) -> "UpgradeHooks":
        if info is None:
            return cls()
        return cls(pre_upgrade=info.pilets.pre_upgrade, post_upgrade=info.pilets.post_upgrade)


def read_pilet_manifest(root: PathLike) -> Tuple[Dict[str, Any], PiletManifest]:
    """
    Read and validate a pilet's package.json.

    Returns:
        Tuple of (raw document, validated manifest)

    Raises:
        ValidationError: If the manifest is not valid JSON or malformed
    """
    data = read_json(root, ManifestKeys.FILE_NAME)
    return data, parse_pilet_manifest(data)


def read_base_package_info(root: PathLike, source_name: str) -> Optional[BasePackageInfo]:
    """
    Read the installed base package's package.json.

    Returns:
        BasePackageInfo, or None when the base package is not installed
    """
    package_dir = Path(root) / Folders.NODE_MODULES / source_name
    if not (package_dir / ManifestKeys.FILE_NAME).is_file():
        logger.debug(f'"{source_name}" is not installed in {root}')
        return None
    return parse_base_package_info(read_json(package_dir, ManifestKeys.FILE_NAME))


def read_upgrade_hooks(root: PathLike, source_name: str) -> UpgradeHooks:
    """Hooks declared by the installed base package (empty when not installed)."""
    return UpgradeHooks.from_base_info(read_base_package_info(root, source_name))


def patch_pilet_manifest(
    root: PathLike,
    source_name: str,
    version: Optional[str],
    base_info: Optional[BasePackageInfo],
    fallback_files: Optional[List[TemplateFile]] = None,
) -> List[TemplateFile]:
    """
    Record the upgraded base package in the pilet's package.json.

    - devDependencies: the base package's version plus the dev dependencies
      it prescribes for pilets
    - scripts: scripts the base package prescribes are merged in
    - peerDependencies: shared externals are declared as ``"*"``
    - piral.files: replaced by the base package's file list, when it has one

    Args:
        root: Pilet directory
        source_name: Base package name
        version: Version to record; None records ``^<installed version>``
        base_info: Metadata of the newly installed base package
        fallback_files: Files to keep when the base package lists none

    Returns:
        The template-managed files of the upgraded pilet
    """
    data = read_json(root, ManifestKeys.FILE_NAME)
    pilets = base_info.pilets if base_info else None

    dev_dependencies: Dict[str, str] = dict(data.get(ManifestKeys.DEV_DEPENDENCIES) or {})
    if pilets:
        dev_dependencies.update(pilets.dev_dependencies)

    recorded = version
    if recorded is None and base_info and base_info.version:
        recorded = f"^{base_info.version}"
    if recorded is not None:
        dev_dependencies[source_name] = recorded
    else:
        logger.warning(
            f'Could not determine the installed version of "{source_name}"; '
            f"keeping the recorded one."
        )
    data[ManifestKeys.DEV_DEPENDENCIES] = dict(sorted(dev_dependencies.items()))

    if pilets and pilets.scripts:
        data[ManifestKeys.SCRIPTS] = {**(data.get(ManifestKeys.SCRIPTS) or {}), **pilets.scripts}

    if pilets and pilets.externals:
        peer_dependencies: Dict[str, str] = dict(data.get(ManifestKeys.PEER_DEPENDENCIES) or {})
        for external in pilets.externals:
            peer_dependencies.setdefault(external, "*")
        data[ManifestKeys.PEER_DEPENDENCIES] = dict(sorted(peer_dependencies.items()))

    files = list(pilets.files) if pilets and pilets.files else list(fallback_files or [])
    piral = dict(data.get(ManifestKeys.PIRAL) or {})
    piral["name"] = source_name
    if files:
        piral["files"] = [f.to_manifest() for f in files]
    data[ManifestKeys.PIRAL] = piral

    write_json(root, ManifestKeys.FILE_NAME, data)
    logger.debug(f"Patched {ManifestKeys.FILE_NAME}", base=source_name, version=recorded)
    return files


__all__ = [
    "UpgradeHooks",
    "read_pilet_manifest",
    "read_base_package_info",
    "read_upgrade_hooks",
    "patch_pilet_manifest",
]
