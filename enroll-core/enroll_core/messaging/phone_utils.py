"""
Phone Utilities
===============
Functions for mobile number validation, normalization and masking.
"""

import re

from enroll_core.exceptions import InvalidInput

_MOBILE_PATTERN = re.compile(r'^[6-9][0-9]{9}$')


def _strip(phone: str) -> str:
    # Drop separators, then any +91 / 91 / 0 trunk prefix
    digits = re.sub(r'[\s\-().]', '', phone)
    if digits.startswith('+'):
        digits = digits[1:]
        if digits.startswith('91') and len(digits) == 12:
            digits = digits[2:]
    elif len(digits) == 12 and digits.startswith('91'):
        digits = digits[2:]
    elif len(digits) == 11 and digits.startswith('0'):
        digits = digits[1:]
    return digits


def validate_mobile(phone: str) -> bool:
    """
    Validate an Indian mobile number.

    Accepts a bare 10-digit number starting with 6-9, optionally written
    with separators or a +91 / 91 / 0 prefix.

    Args:
        phone: Raw phone number

    Returns:
        True if the number is a valid mobile number
    """
    if not isinstance(phone, str):
        return False
    return bool(_MOBILE_PATTERN.match(_strip(phone)))


def normalize_mobile(phone: str) -> str:
    """
    Normalize a mobile number to its 10-digit national form.

    Args:
        phone: Raw phone number

    Returns:
        10-digit mobile number

    Raises:
        InvalidInput: If the number is not a valid mobile number
    """
    if not isinstance(phone, str) or not phone.strip():
        raise InvalidInput("Phone number is required", field="phoneNumber")
    digits = _strip(phone)
    if not _MOBILE_PATTERN.match(digits):
        raise InvalidInput("Invalid phone number", field="phoneNumber")
    return digits


def to_e164(mobile: str, country_code: str = "91") -> str:
    """Format a national mobile number as E.164."""
    return f"+{country_code}{normalize_mobile(mobile)}"


def mask_phone(phone: str) -> str:
    """Mask all but the last four digits, for log output."""
    if not phone:
        return ""
    visible = phone[-4:]
    return "*" * max(len(phone) - 4, 0) + visible
