"""
Tests for OTP Issuance and Verification
=======================================
"""

import random
import threading

import pytest

from conftest import SequenceRandom


def wrong_code(code):
    return "1000" if code != "1000" else "1001"


class TestGenerateOTP:
    """Tests for code generation."""

    def test_four_digit_range(self):
        """Codes are 4 digits with no leading zero."""
        from enroll_core.otp import generate_otp

        rng = random.Random(42)
        for _ in range(200):
            code = generate_otp(4, rng=rng)
            assert len(code) == 4
            assert code.isdigit()
            assert 1000 <= int(code) <= 9999

    def test_bounds_passed_to_rng(self):
        """Should ask the random source for the fixed-width range."""
        from enroll_core.otp import generate_otp

        rng = SequenceRandom(4321)
        assert generate_otp(4, rng=rng) == "4321"
        assert rng.calls == [(1000, 9999)]

    def test_default_source(self):
        """Should work without an injected random source."""
        from enroll_core.otp import generate_otp

        code = generate_otp(6)
        assert len(code) == 6
        assert code[0] != "0"

    def test_invalid_length(self):
        from enroll_core.otp import generate_otp

        with pytest.raises(ValueError):
            generate_otp(0)


class TestOTPConfig:
    """Tests for configuration validation."""

    def test_defaults(self):
        from enroll_core.otp import OTPConfig

        config = OTPConfig()
        assert config.length == 4
        assert config.ttl_seconds == 300
        assert config.max_attempts == 3

    @pytest.mark.parametrize("kwargs", [
        {"length": 0},
        {"ttl_seconds": 0},
        {"max_attempts": 0},
    ])
    def test_rejects_invalid(self, kwargs):
        from enroll_core.otp import OTPConfig

        with pytest.raises(ValueError):
            OTPConfig(**kwargs)


class TestOTPGuard:
    """Tests for the verification guard."""

    def test_issue_returns_code(self, guard):
        """An issued code verifies."""
        from enroll_core.otp import VerifyOutcome

        code = guard.issue("9876543210")

        assert len(code) == 4 and code.isdigit()
        assert guard.verify("9876543210", code).outcome is VerifyOutcome.SUCCESS

    def test_single_use(self, guard):
        """A code verifies once; the second attempt finds nothing."""
        from enroll_core.otp import VerifyOutcome

        code = guard.issue("9876543210")

        assert guard.verify("9876543210", code).ok
        assert guard.verify("9876543210", code).outcome is VerifyOutcome.NOT_FOUND

    def test_attempt_budget(self, guard):
        """Three misses count down to zero, then the record is gone."""
        from enroll_core.otp import VerificationResult

        code = guard.issue("9876543210")
        bad = wrong_code(code)

        assert guard.verify("9876543210", bad) == VerificationResult.mismatch(2)
        assert guard.verify("9876543210", bad) == VerificationResult.mismatch(1)
        assert guard.verify("9876543210", bad) == VerificationResult.mismatch(0)
        assert guard.verify("9876543210", code) == VerificationResult.not_found()

    def test_mismatch_then_success(self, guard):
        """A correct code still works while attempts remain."""
        code = guard.issue("9876543210")

        assert guard.verify("9876543210", wrong_code(code)).attempts_remaining == 2
        assert guard.verify("9876543210", code).ok

    def test_never_issued(self, guard):
        """An unknown number is NOT_FOUND."""
        from enroll_core.otp import VerifyOutcome

        assert guard.verify("0000000000", "1234").outcome is VerifyOutcome.NOT_FOUND

    def test_valid_at_exact_ttl(self, guard, clock):
        """The code is still valid at exactly issued_at + ttl."""
        code = guard.issue("9876543210")
        clock.advance(300)

        assert guard.verify("9876543210", code).ok

    def test_expired_with_correct_code(self, guard, clock):
        """Expiry wins over a correct code, then the record is gone."""
        from enroll_core.otp import VerifyOutcome

        code = guard.issue("9876543210")
        clock.advance(301)

        assert guard.verify("9876543210", code).outcome is VerifyOutcome.EXPIRED
        assert guard.verify("9876543210", code).outcome is VerifyOutcome.NOT_FOUND

    def test_expired_after_misses(self, guard, clock):
        """Expiry wins regardless of the remaining attempt budget."""
        from enroll_core.otp import VerifyOutcome

        code = guard.issue("9876543210")
        guard.verify("9876543210", wrong_code(code))
        guard.verify("9876543210", wrong_code(code))
        clock.advance(600)

        assert guard.verify("9876543210", wrong_code(code)).outcome is VerifyOutcome.EXPIRED
        assert guard.verify("9876543210", code).outcome is VerifyOutcome.NOT_FOUND

    def test_reissue_overwrites(self, clock):
        """Re-issuing invalidates the previous code and resets attempts."""
        from enroll_core.otp import OTPGuard, VerificationResult

        guard = OTPGuard(clock=clock, rng=SequenceRandom(1111, 2222))
        first = guard.issue("9876543210")
        guard.verify("9876543210", "9999")
        guard.verify("9876543210", "9999")
        second = guard.issue("9876543210")

        assert (first, second) == ("1111", "2222")
        assert guard.verify("9876543210", first) == VerificationResult.mismatch(2)
        assert guard.verify("9876543210", second).ok

    def test_reissue_restarts_ttl(self, guard, clock):
        code = guard.issue("9876543210")
        clock.advance(250)
        code = guard.issue("9876543210")
        clock.advance(250)

        assert guard.verify("9876543210", code).ok

    def test_isolation(self, guard, clock):
        """Exhausting or expiring one number leaves another untouched."""
        from enroll_core.otp import VerifyOutcome

        code_a = guard.issue("9876543210")
        code_b = guard.issue("9123456789")

        for _ in range(3):
            guard.verify("9876543210", wrong_code(code_a))
        assert guard.verify("9876543210", code_a).outcome is VerifyOutcome.NOT_FOUND

        assert guard.verify("9123456789", code_b).ok

    def test_isolation_across_expiry(self, guard, clock):
        code_a = guard.issue("9876543210")
        clock.advance(200)
        code_b = guard.issue("9123456789")
        clock.advance(200)

        assert not guard.verify("9876543210", code_a).ok
        assert guard.verify("9123456789", code_b).ok

    def test_custom_budget(self, clock):
        """Attempt budget follows the configuration."""
        from enroll_core.otp import OTPGuard, OTPConfig, VerificationResult

        guard = OTPGuard(OTPConfig(max_attempts=1), clock=clock)
        code = guard.issue("9876543210")

        assert guard.verify("9876543210", wrong_code(code)) == VerificationResult.mismatch(0)
        assert guard.verify("9876543210", code) == VerificationResult.not_found()

    @pytest.mark.parametrize("phone", ["", None, 9876543210])
    def test_issue_invalid_phone(self, guard, phone):
        from enroll_core.exceptions import InvalidInput

        with pytest.raises(InvalidInput):
            guard.issue(phone)

    @pytest.mark.parametrize("code", ["", None, 1234])
    def test_verify_invalid_code(self, guard, code):
        """Malformed codes raise instead of consuming an attempt."""
        from enroll_core.exceptions import InvalidInput

        real = guard.issue("9876543210")
        with pytest.raises(InvalidInput):
            guard.verify("9876543210", code)

        assert guard.verify("9876543210", real).ok

    def test_invariant_violation(self, guard):
        """A live record over budget is a programming error."""
        from enroll_core.exceptions import OTPInvariantError

        guard.issue("9876543210")
        slot = guard._slot("9876543210")
        guard._shards[slot]["9876543210"].attempts_used = 3

        with pytest.raises(OTPInvariantError):
            guard.verify("9876543210", "0000")

    def test_live_count(self, guard, clock):
        code = guard.issue("9876543210")
        guard.issue("9123456789")
        assert guard.live_count() == 2

        guard.verify("9876543210", code)
        assert guard.live_count() == 1

    def test_revoke(self, guard):
        """A revoked code no longer verifies."""
        from enroll_core.otp import VerifyOutcome

        code = guard.issue("9876543210")

        assert guard.revoke("9876543210") is True
        assert guard.revoke("9876543210") is False
        assert guard.verify("9876543210", code).outcome is VerifyOutcome.NOT_FOUND

    def test_concurrent_verify_single_success(self, clock):
        """Only one of many concurrent correct submissions succeeds."""
        from enroll_core.otp import OTPGuard

        guard = OTPGuard(clock=clock, shards=1)
        code = guard.issue("9876543210")
        results = []

        def worker():
            results.append(guard.verify("9876543210", code).ok)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1

    def test_rejects_zero_shards(self):
        from enroll_core.otp import OTPGuard

        with pytest.raises(ValueError):
            OTPGuard(shards=0)
