"""piletkit schema - typed views of pilet and base package manifests."""

from .manifest_v1 import (
    BasePackageInfo,
    ForceOverwrite,
    PiletManifest,
    PiletsInfo,
    PiralSection,
    TemplateFile,
    parse_base_package_info,
    parse_pilet_manifest,
)

__all__ = [
    "BasePackageInfo",
    "ForceOverwrite",
    "PiletManifest",
    "PiletsInfo",
    "PiralSection",
    "TemplateFile",
    "parse_base_package_info",
    "parse_pilet_manifest",
]
