"""
Domain Exceptions
=================
Exception classes shared across enroll-core modules.
"""

from typing import Optional


class EnrollError(Exception):
    """Base exception for enroll-core."""
    pass


class InvalidInput(EnrollError, ValueError):
    """Raised when a caller passes malformed input to a component."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class OTPInvariantError(EnrollError, RuntimeError):
    """Raised when a live OTP record is found in an impossible state."""
    pass


class DuplicateCandidateError(EnrollError):
    """Raised when a candidate collides on a unique field."""

    def __init__(self, field: str, value: str):
        super().__init__(f"Candidate with {field}={value!r} already exists")
        self.field = field
        self.value = value
