"""Custom exceptions for the prefs_helper package."""

from __future__ import annotations


class PrefsError(Exception):
    """Base exception for all preference-related errors."""


class StoreError(PrefsError):
    """Raised when an underlying store operation fails."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        msg = f"Store error during '{operation}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class ConfigError(PrefsError):
    """Raised when a store is misconfigured."""

    def __init__(self, store_name: str, message: str) -> None:
        self.store_name = store_name
        super().__init__(f"Store '{store_name}' misconfigured: {message}")
