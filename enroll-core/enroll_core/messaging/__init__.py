"""
Messaging Utilities
===================
Phone number handling for OTP delivery and candidate records.
"""

from .phone_utils import validate_mobile, normalize_mobile, to_e164, mask_phone

__all__ = [
    "validate_mobile",
    "normalize_mobile",
    "to_e164",
    "mask_phone",
]
