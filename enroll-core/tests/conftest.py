"""
Shared fixtures for enroll-core tests.
"""

from datetime import datetime, timedelta, timezone

import pytest


class FrozenClock:
    """Manually advanced clock."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


class SequenceRandom:
    """Returns queued values from randint, ignoring the bounds."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        return self.values.pop(0)


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def guard(clock):
    from enroll_core.otp import OTPGuard, OTPConfig

    return OTPGuard(OTPConfig(length=4, ttl_seconds=300, max_attempts=3), clock=clock)
