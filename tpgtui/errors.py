"""Exception hierarchy shared by collaborator adapters."""

from __future__ import annotations


class TpgError(Exception):
    """Base class for errors surfaced to the UI as a banner."""


class StoreError(TpgError):
    """Raised by store adapters when a read or mutation fails."""


class TemplateError(TpgError):
    """Raised when a template cannot be found, parsed or validated."""


class ConfigError(TpgError):
    """Raised when project config cannot be read, written or updated."""


__all__ = ["TpgError", "StoreError", "TemplateError", "ConfigError"]
