"""
piletkit Upgrade Module
=======================

Upgrades the base package ("app shell") of a pilet:
- Resolving what to install from the requested version, path or git URL
- Running the base package's pre- and post-upgrade hooks
- Installing the new base package and patching the pilet's package.json
- Reconciling the template-managed files
- Reinstalling dependencies and clearing the bundler cache

Stages run strictly in order and the first failure aborts the run. No
external side effect (hook, install, file write) happens before the
manifest and the upgrade target have been validated.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from piletkit_common.config import get_settings
from piletkit_common.constants import DEFAULT_FORCE_OVERWRITE, DEFAULT_TARGET, DEFAULT_VERSION
from piletkit_common.errors import (
    MissingDeclarationError,
    MissingFileReferenceError,
    PiletError,
    ValidationError,
)
from piletkit_common.logger import get_logger
from piletkit_schema import BasePackageInfo, ForceOverwrite, PiletManifest, TemplateFile

from .manifest import (
    UpgradeHooks,
    patch_pilet_manifest,
    read_base_package_info,
    read_pilet_manifest,
)
from .packages import (
    NoticeLevel,
    PackageSpecifier,
    SourceType,
    VersionResolver,
    is_linked_package,
    is_local_package,
    parse_package_specifier,
)
from .templates import ConfirmCallback, ReconcileReport, TemplateReconciler
from .utils.package_manager import NpmClient, PackageManagerRunner
from .utils.workspace import check_existing_directory, clear_cache, find_workspace_root

logger = get_logger(__name__)

PathLike = Union[str, Path]


# ============================================================================
# Options, Stages and Context
# ============================================================================


@dataclass
class UpgradeOptions:
    """
    User-facing options of an upgrade.

    Attributes:
        version: Version, tag, local path (relative to the pilet) or git URL to upgrade to
        target: Pilet directory, relative to the base directory
        force_overwrite: Overwrite policy for template-managed files
    """

    version: str = DEFAULT_VERSION
    target: str = DEFAULT_TARGET
    force_overwrite: ForceOverwrite = ForceOverwrite(DEFAULT_FORCE_OVERWRITE)


class UpgradeStage(str, Enum):
    INIT = "init"
    VALIDATE_TARGET = "validate-target"
    READ_MANIFEST = "read-manifest"
    RESOLVE_REFERENCE = "resolve-reference"
    VERIFY_FILE_EXISTS = "verify-file-exists"
    LOAD_HOOKS = "load-hooks"
    SNAPSHOT_FILES = "snapshot-files"
    PRE_HOOK = "pre-hook"
    INSTALL = "install"
    PATCH_MANIFEST_AND_FILES = "patch-manifest-and-files"
    REINSTALL_DEPS = "reinstall-deps"
    POST_HOOK = "post-hook"
    CLEAR_CACHE = "clear-cache"
    DONE = "done"


@dataclass
class UpgradeContext:
    """Mutable state threaded through the upgrade stages."""

    base_dir: Path
    options: UpgradeOptions
    stage: UpgradeStage = UpgradeStage.INIT
    root: Optional[Path] = None
    manifest: Optional[PiletManifest] = None
    source_name: Optional[str] = None
    current_version: Optional[str] = None
    specifier: Optional[PackageSpecifier] = None
    is_local: bool = False
    is_linked: bool = False
    package_ref: Optional[str] = None
    package_version: Optional[str] = None
    source_type: Optional[SourceType] = None
    base_info: Optional[BasePackageInfo] = None
    hooks: UpgradeHooks = field(default_factory=UpgradeHooks)
    original_files: Dict[str, str] = field(default_factory=dict)
    files: List[TemplateFile] = field(default_factory=list)
    report: ReconcileReport = field(default_factory=ReconcileReport)
    completed_stages: List[UpgradeStage] = field(default_factory=list)

    def template_context(self) -> Dict[str, Any]:
        """Variables available to ``.j2`` template files."""
        pilet = (self.manifest.name if self.manifest else None) or (
            self.root.name if self.root else ""
        )
        return {
            "pilet": pilet,
            "base_package": self.source_name or "",
            "base_version": (self.base_info.version if self.base_info else None) or "",
        }


@dataclass
class UpgradeResult:
    """Outcome of a successful upgrade."""

    root: Path
    source_name: str
    package_ref: str
    package_version: Optional[str]
    source_type: SourceType
    written_files: List[str]
    skipped_files: List[str]
    stages: List[UpgradeStage]


# ============================================================================
# Orchestrator
# ============================================================================


class UpgradeOrchestrator:
    """
    Runs the upgrade stages for one pilet.

    Args:
        runner: Package manager runner (installs and hook scripts)
        reconciler: Template file reconciler
        hooks: Hooks to run instead of the ones the base package declares
        confirm: Asked before replacing a modified file under the ``prompt`` policy

    Example:
        >>> orchestrator = UpgradeOrchestrator()
        >>> result = orchestrator.run(Path.cwd(), UpgradeOptions(version="2.0.0"))
    """

    def __init__(
        self,
        runner: Optional[PackageManagerRunner] = None,
        reconciler: Optional[TemplateReconciler] = None,
        hooks: Optional[UpgradeHooks] = None,
        confirm: Optional[ConfirmCallback] = None,
    ):
        self.runner = runner or PackageManagerRunner()
        self.reconciler = reconciler or TemplateReconciler()
        self.hooks = hooks
        self.confirm = confirm
        self.context: Optional[UpgradeContext] = None

    def _pipeline(self) -> List[tuple]:
        return [
            (UpgradeStage.VALIDATE_TARGET, self._validate_target),
            (UpgradeStage.READ_MANIFEST, self._read_manifest),
            (UpgradeStage.RESOLVE_REFERENCE, self._resolve_reference),
            (UpgradeStage.VERIFY_FILE_EXISTS, self._verify_file_exists),
            (UpgradeStage.LOAD_HOOKS, self._load_hooks),
            (UpgradeStage.SNAPSHOT_FILES, self._snapshot_files),
            (UpgradeStage.PRE_HOOK, self._pre_hook),
            (UpgradeStage.INSTALL, self._install),
            (UpgradeStage.PATCH_MANIFEST_AND_FILES, self._patch_manifest_and_files),
            (UpgradeStage.REINSTALL_DEPS, self._reinstall_dependencies),
            (UpgradeStage.POST_HOOK, self._post_hook),
            (UpgradeStage.CLEAR_CACHE, self._clear_cache),
        ]

    @staticmethod
    def _applies(stage: UpgradeStage, ctx: UpgradeContext) -> bool:
        if stage == UpgradeStage.VERIFY_FILE_EXISTS:
            return ctx.source_type == SourceType.FILE
        if stage == UpgradeStage.PRE_HOOK:
            return bool(ctx.hooks.pre_upgrade)
        if stage == UpgradeStage.POST_HOOK:
            return bool(ctx.hooks.post_upgrade)
        return True

    def run(
        self,
        base_dir: Optional[PathLike] = None,
        options: Optional[UpgradeOptions] = None,
    ) -> UpgradeResult:
        """
        Upgrade the pilet described by ``options``.

        Args:
            base_dir: Directory the target is relative to
                (defaults to the current working directory)
            options: Upgrade options (defaults: latest, ".", no overwrite)

        Returns:
            UpgradeResult

        Raises:
            ValidationError: If the target is not a pilet directory
            MissingDeclarationError: If the manifest has no "piral" section
            MissingFileReferenceError: If a local upgrade reference does not exist
            HookFailure: If a pre- or post-upgrade script fails
            DownstreamToolFailure: If the package manager fails
        """
        ctx = UpgradeContext(
            base_dir=Path(base_dir) if base_dir is not None else Path.cwd(),
            options=options or UpgradeOptions(),
        )
        self.context = ctx

        for stage, step in self._pipeline():
            if not self._applies(stage, ctx):
                continue
            logger.debug(f"Stage: {stage.value}")
            try:
                step(ctx)
            except PiletError:
                logger.debug(f"Upgrade aborted during stage '{stage.value}'")
                raise
            ctx.stage = stage
            ctx.completed_stages.append(stage)

        ctx.stage = UpgradeStage.DONE
        logger.info("All done!")

        return UpgradeResult(
            root=ctx.root,
            source_name=ctx.source_name,
            package_ref=ctx.package_ref,
            package_version=ctx.package_version,
            source_type=ctx.source_type,
            written_files=list(ctx.report.written),
            skipped_files=list(ctx.report.skipped),
            stages=list(ctx.completed_stages),
        )

    # ------------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------------

    def _validate_target(self, ctx: UpgradeContext) -> None:
        root = Path(os.path.abspath(os.path.join(ctx.base_dir, ctx.options.target or DEFAULT_TARGET)))
        if not check_existing_directory(root):
            raise ValidationError(
                f'The provided target "{root}" is not a valid pilet directory. '
                f'It must be a directory containing a "package.json".'
            )
        ctx.root = root

    def _read_manifest(self, ctx: UpgradeContext) -> None:
        _, manifest = read_pilet_manifest(ctx.root)
        if manifest.piral is None:
            raise MissingDeclarationError(
                'Could not find a "piral" section in the "package.json" file. Aborting.'
            )
        ctx.manifest = manifest
        ctx.source_name = manifest.piral.name
        ctx.current_version = manifest.current_version()
        logger.info(f'Upgrading pilet "{manifest.name or ctx.root.name}" based on "{ctx.source_name}"')

    def _resolve_reference(self, ctx: UpgradeContext) -> None:
        requested = ctx.options.version or DEFAULT_VERSION
        ctx.is_local = is_local_package(ctx.root, requested)

        parsed = parse_package_specifier(ctx.root, requested)
        if parsed.source_type == SourceType.REGISTRY:
            parsed = PackageSpecifier(
                name=ctx.source_name,
                version=requested,
                had_explicit_version=requested != DEFAULT_VERSION,
                source_type=SourceType.REGISTRY,
            )
        ctx.specifier = parsed

        resolved = VersionResolver(ctx.root).resolve(
            ctx.source_name, ctx.current_version, requested, ctx.is_local
        )
        for notice in resolved.notices:
            if notice.level == NoticeLevel.WARNING:
                logger.warning(notice.message)
            else:
                logger.info(notice.message)

        ctx.package_ref = resolved.reference
        ctx.package_version = resolved.effective_version
        ctx.source_type = resolved.source_type
        ctx.is_linked = is_linked_package(
            ctx.source_name, parsed.source_type, parsed.had_explicit_version, ctx.root
        )
        if ctx.is_linked:
            logger.info(f'"{ctx.source_name}" is currently linked; it will be replaced by an installed copy.')
        logger.debug(f"Resolved {requested} to {ctx.package_ref}", source=ctx.source_type.value)

    def _verify_file_exists(self, ctx: UpgradeContext) -> None:
        if not Path(ctx.package_ref).exists():
            raise MissingFileReferenceError(
                f'Could not find "{ctx.package_ref}" for upgrading. Aborting.',
                path=ctx.package_ref,
            )

    def _load_hooks(self, ctx: UpgradeContext) -> None:
        ctx.base_info = read_base_package_info(ctx.root, ctx.source_name)
        ctx.hooks = self.hooks if self.hooks is not None else UpgradeHooks.from_base_info(ctx.base_info)

    def _snapshot_files(self, ctx: UpgradeContext) -> None:
        ctx.original_files = self.reconciler.snapshot(
            ctx.root, ctx.source_name, ctx.manifest.piral.files, ctx.template_context()
        )

    def _pre_hook(self, ctx: UpgradeContext) -> None:
        logger.info(f"Running pre-upgrade script: {ctx.hooks.pre_upgrade}")
        self.runner.run_script(ctx.hooks.pre_upgrade, ctx.root)

    def _install(self, ctx: UpgradeContext) -> None:
        logger.info(f"Updating NPM package to {ctx.package_ref} ...")
        self.runner.install_package(ctx.package_ref, ctx.root)

    def _patch_manifest_and_files(self, ctx: UpgradeContext) -> None:
        logger.info("Taking care of templating ...")
        ctx.base_info = read_base_package_info(ctx.root, ctx.source_name)
        ctx.files = patch_pilet_manifest(
            ctx.root,
            ctx.source_name,
            ctx.package_version,
            ctx.base_info,
            fallback_files=ctx.manifest.piral.files,
        )
        ctx.report = self.reconciler.reconcile(
            ctx.root,
            ctx.source_name,
            ctx.files,
            ctx.options.force_overwrite,
            original_files=ctx.original_files,
            confirm=self.confirm,
            context=ctx.template_context(),
        )

    def _reinstall_dependencies(self, ctx: UpgradeContext) -> None:
        install_root = ctx.root
        workspace = find_workspace_root(ctx.root)
        if workspace:
            workspace_root, kind = workspace
            logger.info(f"Monorepo ({kind}) detected at {workspace_root}")
            if kind in ("workspaces", "pnpm"):
                install_root = workspace_root
        logger.info("Updating dependencies ...")
        self.runner.install_dependencies(install_root)

    def _post_hook(self, ctx: UpgradeContext) -> None:
        logger.info(f"Running post-upgrade script: {ctx.hooks.post_upgrade}")
        self.runner.run_script(ctx.hooks.post_upgrade, ctx.root)

    def _clear_cache(self, ctx: UpgradeContext) -> None:
        clear_cache(ctx.root, get_settings().cache_dir_name)


# ============================================================================
# Convenience Function
# ============================================================================


def upgrade_pilet(
    base_dir: Optional[PathLike] = None,
    version: str = DEFAULT_VERSION,
    target: str = DEFAULT_TARGET,
    force_overwrite: Union[ForceOverwrite, str] = DEFAULT_FORCE_OVERWRITE,
    npm_client: Union[NpmClient, str, None] = None,
    hooks: Optional[UpgradeHooks] = None,
    confirm: Optional[Callable[[str], bool]] = None,
    runner: Optional[PackageManagerRunner] = None,
) -> UpgradeResult:
    """
    Upgrade a pilet's base package.

    Args:
        base_dir: Directory the target is relative to
        version: Version, tag, local path (relative to the pilet) or git URL to upgrade to
        target: Pilet directory relative to ``base_dir``
        force_overwrite: "no", "prompt" or "yes"
        npm_client: Package manager to use (detected from lock files when None)
        hooks: Hooks overriding the ones declared by the base package
        confirm: Asked before replacing a modified file under "prompt"
        runner: Custom package manager runner

    Returns:
        UpgradeResult

    Example:
        >>> result = upgrade_pilet(version="2.0.0", force_overwrite="prompt")
        >>> print(result.package_ref)
    """
    options = UpgradeOptions(
        version=version or DEFAULT_VERSION,
        target=target or DEFAULT_TARGET,
        force_overwrite=ForceOverwrite(force_overwrite),
    )
    orchestrator = UpgradeOrchestrator(
        runner=runner or PackageManagerRunner(client=npm_client),
        hooks=hooks,
        confirm=confirm,
    )
    return orchestrator.run(base_dir, options)


__all__ = [
    "UpgradeOptions",
    "UpgradeStage",
    "UpgradeContext",
    "UpgradeResult",
    "UpgradeOrchestrator",
    "upgrade_pilet",
]
