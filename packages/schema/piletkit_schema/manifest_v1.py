"""
piletkit Manifest Schema v1

Pydantic models for the two JSON documents the upgrade engine reads:

- the pilet's own ``package.json`` (``PiletManifest``), whose ``piral``
  section names the base package and its template-managed files
- the installed base package's ``package.json`` (``BasePackageInfo``),
  whose ``pilets`` section carries scaffolding metadata and upgrade hooks

Design Principles:
- Pure validation: receives dicts, returns typed objects
- No file I/O: reading and writing manifests is the SDK's responsibility
- Lenient: unknown fields are kept, npm manifests carry many of them

Usage:
    from piletkit_schema import PiletManifest

    manifest = PiletManifest.model_validate(json.loads(text))
    if manifest.piral is None:
        ...
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from piletkit_common.errors import ValidationError


class ForceOverwrite(str, Enum):
    """Overwrite policy for template-managed files."""

    NO = "no"  # never overwrite an existing file
    PROMPT = "prompt"  # ask when the file was changed since the snapshot
    YES = "yes"  # always overwrite


# =============================================================================
# TEMPLATE FILES
# =============================================================================


class TemplateFile(BaseModel):
    """
    A file (or directory) copied from the base package into the pilet.

    Accepts the short form ``"src/index.tsx"`` (same source and target)
    as well as ``{"from": ..., "to": ..., "deep": ..., "once": ...}``.
    """

    from_: str = Field(alias="from")
    to: str = ""
    deep: bool = True
    once: bool = False

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def expand_short_form(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"from": data, "to": data}
        if isinstance(data, dict) and not data.get("to"):
            source = data.get("from", data.get("from_"))
            if source:
                data = {**data, "to": source}
        return data

    @field_validator("from_")
    @classmethod
    def validate_source(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("template file source cannot be empty")
        return v

    def to_manifest(self) -> Any:
        """Serialize back to the shortest manifest form."""
        if self.from_ == self.to and self.deep and not self.once:
            return self.from_
        data: Dict[str, Any] = {"from": self.from_, "to": self.to}
        if not self.deep:
            data["deep"] = False
        if self.once:
            data["once"] = True
        return data


# =============================================================================
# PILET MANIFEST
# =============================================================================


class PiralSection(BaseModel):
    """The ``piral`` section of a pilet manifest."""

    name: str
    files: List[TemplateFile] = []

    model_config = ConfigDict(extra="allow")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("the piral section must name the base package")
        return v.strip()


class PiletManifest(BaseModel):
    """A pilet's ``package.json``."""

    name: Optional[str] = None
    version: Optional[str] = None
    dev_dependencies: Dict[str, str] = Field(default_factory=dict, alias="devDependencies")
    peer_dependencies: Dict[str, str] = Field(default_factory=dict, alias="peerDependencies")
    scripts: Dict[str, str] = {}
    piral: Optional[PiralSection] = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @property
    def base_package(self) -> Optional[str]:
        return self.piral.name if self.piral else None

    def current_version(self) -> Optional[str]:
        """Version of the base package as recorded in devDependencies."""
        if not self.piral:
            return None
        return self.dev_dependencies.get(self.piral.name)


# =============================================================================
# BASE PACKAGE METADATA
# =============================================================================


class PiletsInfo(BaseModel):
    """The ``pilets`` section of a base package's ``package.json``."""

    files: List[TemplateFile] = []
    scripts: Dict[str, str] = {}
    dev_dependencies: Dict[str, str] = Field(default_factory=dict, alias="devDependencies")
    externals: List[str] = []
    pre_upgrade: Optional[str] = Field(default=None, alias="preUpgrade")
    post_upgrade: Optional[str] = Field(default=None, alias="postUpgrade")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class BasePackageInfo(BaseModel):
    """The installed base package's ``package.json``."""

    name: str
    version: Optional[str] = None
    pilets: PiletsInfo = Field(default_factory=PiletsInfo)

    model_config = ConfigDict(extra="allow")

    @field_validator("pilets", mode="before")
    @classmethod
    def default_pilets(cls, v: Any) -> Any:
        return {} if v is None else v


# =============================================================================
# HELPERS
# =============================================================================


def _describe(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "<root>"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)


def parse_pilet_manifest(data: Any) -> PiletManifest:
    """
    Validate a parsed pilet ``package.json``.

    Raises:
        ValidationError: If the document is not an object or is malformed
    """
    if not isinstance(data, dict):
        raise ValidationError("The package.json must contain a JSON object.")
    try:
        return PiletManifest.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid package.json: {_describe(e)}") from e


def parse_base_package_info(data: Any) -> BasePackageInfo:
    """
    Validate a parsed base package ``package.json``.

    Raises:
        ValidationError: If the document is not an object or is malformed
    """
    if not isinstance(data, dict):
        raise ValidationError("The base package's package.json must contain a JSON object.")
    try:
        return BasePackageInfo.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid base package metadata: {_describe(e)}") from e
