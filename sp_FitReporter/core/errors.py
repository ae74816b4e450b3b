# sp_FitReporter/core/errors.py
from __future__ import annotations


class SpFitError(Exception):
    """Base exception for the cross-section fit report."""


class LoadError(SpFitError):
    """Raised when the input table is missing, unreadable or malformed."""


class DomainError(SpFitError):
    """Raised when a value that needs a logarithm is not positive."""


class InsufficientDataError(SpFitError):
    """Raised when a regression has fewer than three usable observations."""

    def __init__(self, message: str, apertures: tuple[int, ...] = ()):
        super().__init__(message)
        self.apertures = tuple(apertures)


class ConfigError(SpFitError, ValueError):
    """Raised when a config value is missing, mistyped or out of range."""
