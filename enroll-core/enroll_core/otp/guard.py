"""
OTP Verification Guard
======================
Issues single-use numeric codes per phone number and adjudicates
submitted codes against the live record.

Records are held in process memory, sharded by phone number. Each shard
has its own lock, so calls for the same number are linearizable and calls
for numbers in different shards never contend. Expiry is checked lazily
on verification.
"""

import hmac
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
import structlog

from enroll_core.exceptions import InvalidInput, OTPInvariantError
from enroll_core.messaging.phone_utils import mask_phone
from .generator import generate_otp
from .models import OTPConfig, OTPRecord, VerificationResult

logger = structlog.get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OTPGuard:
    """In-memory OTP issuance and single-use verification."""

    def __init__(
        self,
        config: Optional[OTPConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[Any] = None,
        shards: int = 16,
    ):
        """
        Args:
            config: Code width, TTL and attempt budget
            clock: Returns the current timezone-aware time
            rng: Random source with ``randint(a, b)``
            shards: Number of independently locked partitions
        """
        if shards < 1:
            raise ValueError("shards must be at least 1")
        self.config = config or OTPConfig()
        self._clock = clock or utc_now
        self._rng = rng
        self._shards: List[Dict[str, OTPRecord]] = [{} for _ in range(shards)]
        self._locks = [threading.Lock() for _ in range(shards)]

    def _slot(self, phone_number: str) -> int:
        return hash(phone_number) % len(self._shards)

    def issue(self, phone_number: str) -> str:
        """
        Issue a new code for a phone number.

        Any live record for the number is replaced outright.

        Args:
            phone_number: Subject identifier

        Returns:
            The generated code, for dispatch by the caller

        Raises:
            InvalidInput: If the phone number is empty
        """
        if not isinstance(phone_number, str) or not phone_number:
            raise InvalidInput("phone_number is required", field="phone_number")

        code = generate_otp(self.config.length, rng=self._rng)
        slot = self._slot(phone_number)

        with self._locks[slot]:
            replaced = phone_number in self._shards[slot]
            self._shards[slot][phone_number] = OTPRecord(
                phone_number=phone_number,
                code=code,
                issued_at=self._clock(),
            )

        logger.info(
            "OTP issued",
            phone=mask_phone(phone_number),
            replaced=replaced,
            expires_in=self.config.ttl_seconds,
        )
        return code

    def verify(self, phone_number: str, submitted_code: str) -> VerificationResult:
        """
        Verify a submitted code.

        Checks run in a fixed order: lookup, expiry, attempt budget, then
        equality. Expired records are deleted without touching the attempt
        counter. A failed attempt that spends the budget deletes the record,
        so the next call reports NOT_FOUND.

        Args:
            phone_number: Subject identifier
            submitted_code: Code entered by the user

        Returns:
            VerificationResult

        Raises:
            InvalidInput: If either argument is empty or not a string
            OTPInvariantError: If a live record already exceeds its budget
        """
        if not isinstance(phone_number, str) or not phone_number:
            raise InvalidInput("phone_number is required", field="phone_number")
        if not isinstance(submitted_code, str) or not submitted_code:
            raise InvalidInput("code is required", field="code")

        slot = self._slot(phone_number)
        masked = mask_phone(phone_number)

        with self._locks[slot]:
            records = self._shards[slot]
            record = records.get(phone_number)

            if record is None:
                logger.info("OTP not found", phone=masked)
                return VerificationResult.not_found()

            if record.is_expired(self._clock(), self.config.ttl):
                del records[phone_number]
                logger.warning("OTP expired", phone=masked)
                return VerificationResult.expired()

            if record.attempts_used >= self.config.max_attempts:
                raise OTPInvariantError(
                    f"live OTP record holds {record.attempts_used} attempts "
                    f"(max {self.config.max_attempts})"
                )

            if hmac.compare_digest(record.code.encode(), submitted_code.encode()):
                del records[phone_number]
                logger.info("OTP verified successfully", phone=masked)
                return VerificationResult.success()

            record.attempts_used += 1
            remaining = self.config.max_attempts - record.attempts_used
            if remaining <= 0:
                del records[phone_number]
                logger.warning("OTP attempts exhausted", phone=masked)
            else:
                logger.warning("Invalid OTP attempt", phone=masked, remaining=remaining)
            return VerificationResult.mismatch(max(remaining, 0))

    def revoke(self, phone_number: str) -> bool:
        """
        Discard the live record for a phone number, if any.

        Used when an issued code could not be delivered.

        Returns:
            True if a record was removed
        """
        slot = self._slot(phone_number)
        with self._locks[slot]:
            removed = self._shards[slot].pop(phone_number, None) is not None
        if removed:
            logger.info("OTP revoked", phone=mask_phone(phone_number))
        return removed

    def live_count(self) -> int:
        """Number of records currently held, expired or not."""
        total = 0
        for lock, records in zip(self._locks, self._shards):
            with lock:
                total += len(records)
        return total
