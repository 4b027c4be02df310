"""
Unit Tests for enroll-core Utilities
====================================
Tests for phone handling, rate limiting and configuration.
"""

import pytest


class TestPhoneUtils:
    """Tests for mobile number handling."""

    @pytest.mark.parametrize("raw", [
        "9876543210",
        "+919876543210",
        "919876543210",
        "09876543210",
        "98765-43210",
        "+91 98765 43210",
    ])
    def test_normalize_accepts(self, raw):
        from enroll_core.messaging import normalize_mobile

        assert normalize_mobile(raw) == "9876543210"

    @pytest.mark.parametrize("raw", [
        "",
        "   ",
        "12345",
        "5876543210",
        "98765432101",
        "abcdefghij",
        "٩٨٧٦٥٤٣٢١٠",
        "9८७६५४३२१०",
    ])
    def test_normalize_rejects(self, raw):
        from enroll_core.exceptions import InvalidInput
        from enroll_core.messaging import normalize_mobile

        with pytest.raises(InvalidInput):
            normalize_mobile(raw)

    def test_validate_mobile(self):
        from enroll_core.messaging import validate_mobile

        assert validate_mobile("9876543210") is True
        assert validate_mobile("1234567890") is False
        assert validate_mobile(None) is False

    def test_to_e164(self):
        from enroll_core.messaging import to_e164

        assert to_e164("98765 43210") == "+919876543210"
        assert to_e164("9876543210", country_code="1") == "+19876543210"

    def test_mask_phone(self):
        from enroll_core.messaging import mask_phone

        assert mask_phone("9876543210") == "******3210"
        assert mask_phone("12") == "12"
        assert mask_phone("") == ""


class TestAadhar:
    """Tests for Aadhar normalization."""

    def test_strips_separators(self):
        from enroll_core.schemas import normalize_aadhar

        assert normalize_aadhar("1234 5678-9012") == "123456789012"

    @pytest.mark.parametrize("raw", [
        "12345678901",
        "1234567890123",
        "१२३४५६७८९०१२",
    ])
    def test_rejects(self, raw):
        from enroll_core.schemas import normalize_aadhar

        with pytest.raises(ValueError):
            normalize_aadhar(raw)


class TestRateLimit:
    """Tests for the in-memory limiter."""

    def test_enforces_rate(self):
        from enroll_core.rate_limit import InMemoryRateLimiter

        limiter = InMemoryRateLimiter(rate=3, window=60, clock=lambda: 1000.0)

        for expected_remaining in (2, 1, 0):
            info = limiter.check("9876543210")
            assert info.allowed is True
            assert info.remaining == expected_remaining

        blocked = limiter.check("9876543210")
        assert blocked.allowed is False
        assert blocked.retry_after == 20  # window 960-1020

    def test_window_resets(self):
        from enroll_core.rate_limit import InMemoryRateLimiter

        now = [1000.0]
        limiter = InMemoryRateLimiter(rate=1, window=60, clock=lambda: now[0])

        assert limiter.check("k").allowed is True
        assert limiter.check("k").allowed is False
        now[0] = 1020.0
        assert limiter.check("k").allowed is True

    def test_separate_keys(self):
        from enroll_core.rate_limit import InMemoryRateLimiter

        limiter = InMemoryRateLimiter(rate=1, window=60)
        limiter.check("user1")

        blocked = limiter.check("user1")
        assert blocked.allowed is False
        assert blocked.key == "user1"
        assert limiter.check("user2").allowed is True

    def test_decision_carries_window(self):
        from enroll_core.rate_limit import InMemoryRateLimiter

        limiter = InMemoryRateLimiter(rate=3, window=60, clock=lambda: 1000.0)
        decision = limiter.check("k")

        assert (decision.used, decision.remaining) == (1, 2)
        assert (decision.window_start, decision.reset_at) == (960, 1020)

    def test_stale_buckets_dropped(self):
        """Keys from earlier windows do not accumulate."""
        from enroll_core.rate_limit import InMemoryRateLimiter

        now = [1000.0]
        limiter = InMemoryRateLimiter(rate=3, window=60, clock=lambda: now[0])
        for i in range(1000):
            limiter.check(f"98765{i:05d}")
        assert limiter.tracked_keys() == 1000

        now[0] += 10_000
        limiter.check("9123456789")

        assert limiter.tracked_keys() == 1

    def test_same_window_keys_kept(self):
        from enroll_core.rate_limit import InMemoryRateLimiter

        now = [1000.0]
        limiter = InMemoryRateLimiter(rate=1, window=60, clock=lambda: now[0])
        limiter.check("a")
        now[0] = 1010.0
        limiter.check("b")

        assert limiter.tracked_keys() == 2
        assert limiter.check("a").allowed is False

    def test_reset(self):
        from enroll_core.rate_limit import InMemoryRateLimiter

        limiter = InMemoryRateLimiter(rate=1, window=60)
        limiter.check("k")
        limiter.reset("k")

        assert limiter.check("k").allowed is True

    def test_rejects_bad_config(self):
        from enroll_core.rate_limit import InMemoryRateLimiter

        with pytest.raises(ValueError):
            InMemoryRateLimiter(rate=0)


class TestSettings:
    """Tests for environment configuration."""

    def test_defaults(self):
        from enroll_core.config import Settings

        settings = Settings.from_env({})

        assert settings.database_url is None
        assert settings.sms_gateway_url is None
        assert settings.sms_demo_fallback is True
        assert settings.otp_config.length == 4
        assert settings.otp_config.ttl_seconds == 300
        assert settings.otp_config.max_attempts == 3

    def test_from_env(self):
        from enroll_core.config import Settings

        settings = Settings.from_env({
            "OTP_LENGTH": "6",
            "OTP_TTL_SECONDS": "120",
            "OTP_MAX_ATTEMPTS": "5",
            "SMS_GATEWAY_URL": "https://sms.example.test/send",
            "SMS_DEMO_FALLBACK": "false",
            "CORS_ORIGINS": "https://portal.example.test, https://admin.example.test",
            "LOG_JSON": "0",
        })

        assert settings.otp_config.length == 6
        assert settings.otp_config.ttl_seconds == 120
        assert settings.otp_config.max_attempts == 5
        assert settings.sms_gateway_url == "https://sms.example.test/send"
        assert settings.sms_demo_fallback is False
        assert settings.log_json is False
        assert settings.cors_origins == ["https://portal.example.test", "https://admin.example.test"]

    def test_malformed_int(self):
        from enroll_core.config import Settings

        with pytest.raises(ValueError):
            Settings.from_env({"OTP_TTL_SECONDS": "five"})

    def test_invalid_otp_config(self):
        from enroll_core.config import Settings

        with pytest.raises(ValueError):
            Settings.from_env({"OTP_MAX_ATTEMPTS": "0"}).otp_config
