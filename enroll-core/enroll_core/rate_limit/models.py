"""
Rate Limit Models
=================
Quota decisions for per-phone OTP issue throttling.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class QuotaDecision:
    """Outcome of counting one request against a key's current window."""
    key: str
    allowed: bool
    used: int
    limit: int
    window_start: int  # Unix timestamp
    reset_at: int  # Unix timestamp
    retry_after: Optional[int] = None  # Seconds until retry allowed

    @property
    def remaining(self) -> int:
        return max(self.limit - self.used, 0)
