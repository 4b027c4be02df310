"""
Enroll Core
===========
Candidate verification and training enrollment service.
"""

__version__ = "0.1.0"

# OTP
from enroll_core.otp import (
    OTPConfig,
    OTPGuard,
    OTPRecord,
    VerificationResult,
    VerifyOutcome,
    generate_otp,
)

# Notification
from enroll_core.notify import (
    NotificationSink,
    DemoEchoSink,
    GatewaySmsSink,
    OTPDispatcher,
    DispatchResult,
)

# Errors
from enroll_core.exceptions import (
    EnrollError,
    InvalidInput,
    OTPInvariantError,
    DuplicateCandidateError,
)

# Config
from enroll_core.config import Settings

# App
from enroll_core.app import create_app

__all__ = [
    # OTP
    "OTPConfig",
    "OTPGuard",
    "OTPRecord",
    "VerificationResult",
    "VerifyOutcome",
    "generate_otp",
    # Notification
    "NotificationSink",
    "DemoEchoSink",
    "GatewaySmsSink",
    "OTPDispatcher",
    "DispatchResult",
    # Errors
    "EnrollError",
    "InvalidInput",
    "OTPInvariantError",
    "DuplicateCandidateError",
    # Config
    "Settings",
    # App
    "create_app",
]
