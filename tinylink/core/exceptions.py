"""
Custom Exceptions

This module defines the error taxonomy of the link engine. Services raise
these to their caller; the API layer maps each one to an HTTP status.

- InvalidTargetError / InvalidCodeError: bad user input, never retried
- CodeConflictError: requested code is taken, caller must pick another
- CodeNotFoundError: lookup or resolution miss
- AllocationExhaustedError: no free generated code within the attempt bound
- StoreUnavailableError: database transport/infrastructure failure (retryable)
"""

from typing import Optional


class TinyLinkException(Exception):
    """Base exception for the link service."""
    pass


class InvalidTargetError(TinyLinkException):
    """Raised when a target URL fails validation."""

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class InvalidCodeError(TinyLinkException):
    """Raised when a requested short code is malformed."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(
            f"Invalid short code '{code}': must be 6-8 letters or digits"
        )


class CodeConflictError(TinyLinkException):
    """Raised when a requested short code is already in use."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Short code '{code}' is already in use")


class CodeNotFoundError(TinyLinkException):
    """Raised when a short code is not found in the database."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Short code '{code}' not found")


class AllocationExhaustedError(TinyLinkException):
    """Raised when every generated candidate code was already taken."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Could not allocate a free short code after {attempts} attempts"
        )


class StoreUnavailableError(TinyLinkException):
    """Raised when the database cannot be reached or a statement fails."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Store unavailable: {message}")
