"""
piletkit Error Classes
======================

Exception hierarchy shared by all piletkit packages.

Every error carries a machine-readable ``code`` and a human-readable
``message`` so the CLI can render it and map it to an exit code.

Usage:
    from piletkit_common.errors import MissingDeclarationError

    raise MissingDeclarationError(
        'Could not find a "piral" section in the "package.json" file. Aborting.'
    )
"""

from typing import Any, Dict, List, Optional


class PiletError(Exception):
    """
    Base class for all piletkit errors.

    Attributes:
        message: Human-readable description
        code: Stable error code (e.g. "VALIDATION_ERROR")
    """

    code = "PILET_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for structured output."""
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
        }

    def __str__(self) -> str:
        return self.message


class ValidationError(PiletError):
    """The upgrade target is not a valid pilet directory or manifest."""

    code = "VALIDATION_ERROR"


class MissingDeclarationError(PiletError):
    """The pilet manifest has no base-package ("piral") section."""

    code = "MISSING_DECLARATION"


class MissingFileReferenceError(PiletError):
    """A local file reference for the upgrade does not exist on disk."""

    code = "MISSING_FILE_REFERENCE"

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class CommandError(PiletError):
    """
    An external command exited unsuccessfully.

    Attributes:
        command: The argument list (or shell string) that was executed
        exit_code: Process exit code, None if the process could not start
        output: Captured stderr/stdout, if any
    """

    code = "COMMAND_ERROR"

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        exit_code: Optional[int] = None,
        output: str = "",
    ):
        super().__init__(message)
        self.command = command or []
        self.exit_code = exit_code
        self.output = output

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["command"] = self.command
        data["exit_code"] = self.exit_code
        return data


class HookFailure(CommandError):
    """A pre- or post-upgrade script exited with a non-zero status."""

    code = "HOOK_FAILURE"


class DownstreamToolFailure(CommandError):
    """The package manager (npm, yarn or pnpm) reported a failure."""

    code = "DOWNSTREAM_TOOL_FAILURE"


__all__ = [
    "PiletError",
    "ValidationError",
    "MissingDeclarationError",
    "MissingFileReferenceError",
    "CommandError",
    "HookFailure",
    "DownstreamToolFailure",
]
