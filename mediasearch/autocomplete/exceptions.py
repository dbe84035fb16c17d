from __future__ import annotations


class AutocompleteError(RuntimeError):
    """Base class for autocomplete lookup failures."""


class LookupTransportError(AutocompleteError):
    """Raised when a remote lookup fails after retries or returns an unusable payload."""

    def __init__(self, message: str, *, term: str | None = None) -> None:
        super().__init__(message)
        self.term = term


class LookupCancelledError(AutocompleteError):
    """Raised when a lookup cycle was superseded before its results could be committed."""
