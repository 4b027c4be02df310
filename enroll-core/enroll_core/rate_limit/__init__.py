"""
Rate Limiting
=============
Per-key request throttling for the HTTP layer.
"""

from .models import QuotaDecision
from .in_memory import InMemoryRateLimiter

__all__ = [
    "QuotaDecision",
    "InMemoryRateLimiter",
]
