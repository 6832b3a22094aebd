"""
piletkit Common Package

Shared utilities and primitives used across all piletkit packages.

This package provides:
- Exception classes for consistent error handling
- Constants for supported values and defaults (namespaced)
- Settings read from the environment
- Logging helpers

Usage:
    from piletkit_common import ValidationError, UpgradeDefaults, get_logger
"""

# Error classes
from .errors import (
    PiletError,
    ValidationError,
    MissingDeclarationError,
    MissingFileReferenceError,
    CommandError,
    HookFailure,
    DownstreamToolFailure,
)

# Constants - Namespaced classes (recommended)
from .constants import (
    UpgradeDefaults,
    ManifestKeys,
    Prefixes,
    LockFiles,
    MonorepoFiles,
    Folders,
    PILETKIT_VERSION,
    SUPPORTED_NPM_CLIENTS,
    FORCE_OVERWRITE_MODES,
    LOG_LEVELS,
)

# Settings
from .config import Settings, get_settings, clear_settings_cache

# Logger
from .logger import PiletLogger, get_logger, configure_logging

__version__ = PILETKIT_VERSION

__all__ = [
    # Errors
    "PiletError",
    "ValidationError",
    "MissingDeclarationError",
    "MissingFileReferenceError",
    "CommandError",
    "HookFailure",
    "DownstreamToolFailure",
    # Constants
    "UpgradeDefaults",
    "ManifestKeys",
    "Prefixes",
    "LockFiles",
    "MonorepoFiles",
    "Folders",
    "PILETKIT_VERSION",
    "SUPPORTED_NPM_CLIENTS",
    "FORCE_OVERWRITE_MODES",
    "LOG_LEVELS",
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Logger
    "PiletLogger",
    "get_logger",
    "configure_logging",
]
