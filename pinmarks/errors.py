from __future__ import annotations


class PinmarksError(Exception):
    """Base class for failures surfaced to the user as notices."""


class StoreUnavailable(PinmarksError):
    """The bookmark tree provider, mutator or key-value store call failed."""


class ValidationError(PinmarksError):
    """User input was rejected before any store call."""


class NotFoundError(PinmarksError):
    """The referenced bookmark or suggestion does not exist."""


class DuplicateError(PinmarksError):
    """The URL is already bookmarked."""
