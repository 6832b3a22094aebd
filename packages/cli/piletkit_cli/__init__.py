"""piletkit CLI - command line interface for upgrading pilets."""

__version__ = "0.1.0"
