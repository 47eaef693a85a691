"""Errors raised while preparing a template checkout."""


class PreparerError(Exception):
    """Base error for template preparation."""


class ConfigurationError(PreparerError):
    """Raised when a template's location or layout cannot be used.

    Detected before any network I/O and never retried.
    """


class FetchError(PreparerError):
    """Raised by a clone primitive when the remote repository cannot be fetched."""


class AllocationError(PreparerError):
    """Raised when the temporary checkout directory cannot be created."""
