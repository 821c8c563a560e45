from __future__ import annotations


class ConfigError(RuntimeError):
    """Raised when configuration is missing or invalid."""


class FetchError(RuntimeError):
    """Raised when a spreadsheet table cannot be retrieved."""


class EntryError(ValueError):
    """Raised when the entry form (username + code) is rejected."""


class SessionError(RuntimeError):
    """Raised when session identity is used outside its owning scope."""
