"""
OTP Code Generation
===================
Numeric code generation with an injectable random source.
"""

import secrets
from typing import Any, Optional

_system_random = secrets.SystemRandom()


def generate_otp(length: int = 4, rng: Optional[Any] = None) -> str:
    """
    Generate a numeric OTP of fixed width.

    The first digit is never zero, so a 4-digit code lies in 1000-9999.

    Args:
        length: Number of digits
        rng: Object with a ``randint(a, b)`` method (defaults to SystemRandom)

    Returns:
        OTP string
    """
    if length < 1:
        raise ValueError("OTP length must be at least 1")
    rng = rng or _system_random
    low = 10 ** (length - 1) if length > 1 else 0
    high = 10 ** length - 1
    return str(rng.randint(low, high))
