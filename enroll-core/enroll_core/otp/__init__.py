"""
OTP Issuance and Verification
=============================
Single-use numeric codes with expiry and a retry budget.
"""

from .models import OTPConfig, OTPRecord, VerificationResult, VerifyOutcome
from .generator import generate_otp
from .guard import OTPGuard

__all__ = [
    # Models
    "OTPConfig",
    "OTPRecord",
    "VerificationResult",
    "VerifyOutcome",
    # Generator
    "generate_otp",
    # Guard
    "OTPGuard",
]
