"""
Custom exception hierarchy for complexr.

Provides granular exception types so the command-line layer can tell
configuration problems apart from unreadable input and from analyses that
do not have enough data to produce a result.
"""

from typing import Any, Dict, Optional


class ComplexrException(Exception):
    """Base exception for all complexr errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception with message and optional details.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# Configuration exceptions
class ValidationException(ComplexrException):
    """Base exception for validation errors."""
    pass


class InvalidParameterError(ValidationException, ValueError):
    """Parameter value is invalid or out of range."""
    pass


# Input exceptions
class InputException(ComplexrException):
    """Base exception for errors raised while reading sequence input."""
    pass


class RecordReadError(InputException):
    """A sequence record or score line is malformed and cannot be read."""
    pass


class InvalidSymbolError(InputException, ValueError):
    """A sequence contains a byte outside the analysis alphabet."""
    pass


# Analysis exceptions
class AnalysisException(ComplexrException):
    """Base exception for analysis errors."""
    pass


class InsufficientDataError(AnalysisException):
    """Insufficient data for analysis."""
    pass
