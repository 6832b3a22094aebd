"""
piletkit Shared Constants

Single source of truth for defaults, manifest keys and package manager
conventions used across the piletkit packages.

Usage:
    from piletkit_common.constants import UpgradeDefaults, Prefixes

    version = options.version or UpgradeDefaults.VERSION
"""


# =============================================================================
# VERSION INFORMATION
# =============================================================================

PILETKIT_VERSION = "0.1.0"
"""Current piletkit version"""


# =============================================================================
# SUPPORTED VALUES
# =============================================================================

SUPPORTED_NPM_CLIENTS = ["npm", "yarn", "pnpm"]
"""Package manager clients piletkit knows how to drive"""

FORCE_OVERWRITE_MODES = ["no", "prompt", "yes"]
"""Overwrite policies for template-managed files (never / prompt-if-changed / always)"""

LOG_LEVELS = ["debug", "info", "warning", "error"]
"""Valid log levels"""


# =============================================================================
# NAMESPACED CONSTANTS
# =============================================================================


class UpgradeDefaults:
    """Defaults of the upgrade-pilet command."""

    VERSION = "latest"
    TARGET = "."
    FORCE_OVERWRITE = "no"
    LOG_LEVEL = "info"


class ManifestKeys:
    """Well-known keys of a package.json manifest."""

    FILE_NAME = "package.json"
    DEV_DEPENDENCIES = "devDependencies"
    PEER_DEPENDENCIES = "peerDependencies"
    SCRIPTS = "scripts"
    PIRAL = "piral"
    PILETS = "pilets"
    WORKSPACES = "workspaces"


class Prefixes:
    """String prefixes used to classify package specifiers."""

    FILE = "file:"
    GIT = "git+"
    GIT_PROTOCOL = "git://"
    HOSTED_GIT = ("github:", "gitlab:", "bitbucket:", "gist:")
    PATHS = ("/", "./", "../", ".\\", "..\\", "~/", "~\\", "file:")
    TARBALL_SUFFIXES = (".tgz", ".tar.gz")


class LockFiles:
    """Lock files that identify the package manager in use."""

    NPM = "package-lock.json"
    YARN = "yarn.lock"
    PNPM = "pnpm-lock.yaml"


class MonorepoFiles:
    """Marker files of the monorepo flavours piletkit can detect."""

    LERNA = "lerna.json"
    PNPM_WORKSPACE = "pnpm-workspace.yaml"


class Folders:
    """Folder names inside a pilet project."""

    NODE_MODULES = "node_modules"
    CACHE = ".cache"


# Convenience aliases
DEFAULT_VERSION = UpgradeDefaults.VERSION
DEFAULT_TARGET = UpgradeDefaults.TARGET
DEFAULT_FORCE_OVERWRITE = UpgradeDefaults.FORCE_OVERWRITE
