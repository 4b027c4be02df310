"""
OTP Models
==========
Data models and enums for OTP issuance and verification.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional


class VerifyOutcome(str, Enum):
    """Outcome of a verification attempt."""
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MISMATCH = "mismatch"


@dataclass(frozen=True)
class OTPConfig:
    """Configuration for OTP issuance."""
    length: int = 4
    ttl_seconds: int = 300  # 5 minutes
    max_attempts: int = 3

    def __post_init__(self):
        if self.length < 1:
            raise ValueError("OTP length must be at least 1")
        if self.ttl_seconds <= 0:
            raise ValueError("OTP ttl_seconds must be positive")
        if self.max_attempts < 1:
            raise ValueError("OTP max_attempts must be at least 1")

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self.ttl_seconds)


@dataclass
class OTPRecord:
    """A live verification ticket for one phone number."""
    phone_number: str
    code: str
    issued_at: datetime
    attempts_used: int = 0

    def expires_at(self, ttl: timedelta) -> datetime:
        return self.issued_at + ttl

    def is_expired(self, now: datetime, ttl: timedelta) -> bool:
        return now > self.expires_at(ttl)


@dataclass(frozen=True)
class VerificationResult:
    """Result of ``OTPGuard.verify``."""
    outcome: VerifyOutcome
    attempts_remaining: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.outcome is VerifyOutcome.SUCCESS

    @classmethod
    def success(cls) -> "VerificationResult":
        return cls(VerifyOutcome.SUCCESS)

    @classmethod
    def not_found(cls) -> "VerificationResult":
        return cls(VerifyOutcome.NOT_FOUND)

    @classmethod
    def expired(cls) -> "VerificationResult":
        return cls(VerifyOutcome.EXPIRED)

    @classmethod
    def mismatch(cls, attempts_remaining: int) -> "VerificationResult":
        return cls(VerifyOutcome.MISMATCH, attempts_remaining)
