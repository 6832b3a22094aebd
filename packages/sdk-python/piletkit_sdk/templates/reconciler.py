"""
piletkit Template Reconciler
============================

Copies template-managed files from the installed base package into a
pilet and decides, per file, whether an existing copy may be replaced.

Files ending in ``.j2`` are rendered with Jinja2 (the suffix is dropped
on the target); everything else is copied byte for byte.

Overwrite policies:
- ``no``: existing files are never replaced
- ``prompt``: files the user has not modified since the snapshot are
  replaced silently; modified files are replaced only when confirmed
- ``yes``: existing files are always replaced

Files marked ``once`` are only written when they do not exist yet.
"""

import hashlib
import json
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from jinja2 import Environment, StrictUndefined, TemplateError

from piletkit_common.constants import Folders
from piletkit_common.errors import PiletError
from piletkit_common.logger import get_logger
from piletkit_schema import ForceOverwrite, TemplateFile

logger = get_logger(__name__)

TEMPLATE_SUFFIX = ".j2"

ConfirmCallback = Callable[[str], bool]


# ============================================================================
# Custom Jinja2 Filters
# ============================================================================


def to_json_filter(value: Any, indent: Optional[int] = None) -> str:
    """Convert value to JSON string."""
    return json.dumps(value, indent=indent, default=str)


def kebab_case_filter(value: str) -> str:
    """Convert "@scope/MyPilet" style names to "scope-my-pilet"."""
    value = re.sub(r"[@/_\s]+", "-", value).strip("-")
    value = re.sub("([a-z0-9])([A-Z])", r"\1-\2", value)
    return value.lower()


# ============================================================================
# Report
# ============================================================================


@dataclass
class ReconcileReport:
    """Target paths (relative, POSIX style) that were written or left alone."""

    written: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def _digest(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


# ============================================================================
# Reconciler
# ============================================================================


class TemplateReconciler:
    """
    Reconciles a pilet's template-managed files with its base package.

    Example:
        >>> reconciler = TemplateReconciler()
        >>> before = reconciler.snapshot(root, "piral-base", files, context)
        >>> # ... install the new base package ...
        >>> report = reconciler.reconcile(root, "piral-base", files, "prompt", before)
    """

    def __init__(self):
        self.env = Environment(
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self.env.filters["to_json"] = to_json_filter
        self.env.filters["kebab_case"] = kebab_case_filter

    def package_root(self, root: Path, source_name: str) -> Path:
        return Path(root) / Folders.NODE_MODULES / source_name

    def _expand(
        self, root: Path, source_name: str, files: List[TemplateFile]
    ) -> Iterator[Tuple[Path, str, TemplateFile]]:
        """Yield (source path, relative target, entry) for every file to copy."""
        package_root = self.package_root(root, source_name)

        for entry in files:
            source = package_root / entry.from_
            if source.is_dir():
                pattern = "**/*" if entry.deep else "*"
                for path in sorted(source.glob(pattern)):
                    if path.is_file():
                        relative = path.relative_to(source).as_posix()
                        yield path, self._target_name(PurePosixPath(entry.to) / relative), entry
            elif source.is_file():
                yield source, self._target_name(PurePosixPath(entry.to)), entry
            else:
                logger.warning(
                    f'The file "{entry.from_}" does not exist in "{source_name}". Skipping.'
                )

    @staticmethod
    def _target_name(target: PurePosixPath) -> str:
        if target.suffix == TEMPLATE_SUFFIX:
            target = target.with_suffix("")
        return target.as_posix()

    def render(self, source: Path, context: Dict[str, Any]) -> bytes:
        """
        Produce the content a source file contributes to the pilet.

        Raises:
            PiletError: If a ``.j2`` template fails to render
        """
        if source.suffix != TEMPLATE_SUFFIX:
            return source.read_bytes()
        try:
            template = self.env.from_string(source.read_text(encoding="utf-8"))
            return template.render(**context).encode("utf-8")
        except TemplateError as e:
            raise PiletError(f"Failed to render template {source}: {e}") from e

    def snapshot(
        self,
        root: Union[str, Path],
        source_name: str,
        files: List[TemplateFile],
        context: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, str]:
        """
        Record what the currently installed base package would produce.

        Args:
            root: Pilet directory
            source_name: Base package name
            files: Template-managed files of the pilet
            context: Template variables

        Returns:
            Mapping of relative target path to sha256 digest
        """
        root = Path(root)
        if not self.package_root(root, source_name).is_dir():
            logger.debug(f'"{source_name}" is not installed; nothing to snapshot.')
            return {}

        hashes: Dict[str, str] = {}
        for source, target, _ in self._expand(root, source_name, files):
            hashes[target] = _digest(self.render(source, context or {}))
        return hashes

    def reconcile(
        self,
        root: Union[str, Path],
        source_name: str,
        files: List[TemplateFile],
        force_overwrite: Union[ForceOverwrite, str] = ForceOverwrite.NO,
        original_files: Optional[Dict[str, str]] = None,
        confirm: Optional[ConfirmCallback] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ReconcileReport:
        """
        Copy the base package's template files into the pilet.

        Args:
            root: Pilet directory
            source_name: Base package name
            files: Template-managed files to reconcile
            force_overwrite: Overwrite policy
            original_files: Snapshot taken before the new base package was installed
            confirm: Asked with the relative path before replacing a modified
                file under the ``prompt`` policy; modified files are kept when None
            context: Template variables

        Returns:
            ReconcileReport
        """
        root = Path(root)
        policy = ForceOverwrite(force_overwrite)
        original_files = original_files or {}
        report = ReconcileReport()

        for source, target, entry in self._expand(root, source_name, files):
            content = self.render(source, context or {})
            destination = root / target

            if destination.exists() and not self._should_overwrite(
                destination, target, content, entry, policy, original_files, confirm
            ):
                logger.debug(f"Keeping {target}")
                report.skipped.append(target)
                continue

            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(content)
            logger.debug(f"Wrote {target}")
            report.written.append(target)

        return report

    def _should_overwrite(
        self,
        destination: Path,
        target: str,
        content: bytes,
        entry: TemplateFile,
        policy: ForceOverwrite,
        original_files: Dict[str, str],
        confirm: Optional[ConfirmCallback],
    ) -> bool:
        if entry.once:
            return False

        current = _digest(destination.read_bytes())
        if current == _digest(content):
            return False
        if policy == ForceOverwrite.YES:
            return True
        if policy == ForceOverwrite.NO:
            return False

        # prompt: untouched files follow the base package without asking
        if original_files.get(target) == current:
            return True
        return bool(confirm and confirm(target))


__all__ = [
    "TemplateReconciler",
    "ReconcileReport",
    "ConfirmCallback",
    "TEMPLATE_SUFFIX",
]
