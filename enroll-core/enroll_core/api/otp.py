"""
OTP Routes
==========
HTTP surface for issuing and verifying one-time passwords.
"""

import re
from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from enroll_core.errors import UserErrors
from enroll_core.exceptions import InvalidInput
from enroll_core.messaging.phone_utils import normalize_mobile, to_e164, mask_phone
from enroll_core.notify.dispatcher import OTPDispatcher
from enroll_core.otp.guard import OTPGuard
from enroll_core.otp.models import VerifyOutcome
from enroll_core.rate_limit.in_memory import InMemoryRateLimiter
from enroll_core.schemas import OTPIssueRequest, OTPVerifyRequest

logger = structlog.get_logger(__name__)


def create_otp_router(
    guard: OTPGuard,
    dispatcher: OTPDispatcher,
    limiter: InMemoryRateLimiter,
    country_code: str = "91",
) -> APIRouter:
    """
    Create the OTP router.

    Args:
        guard: Owner of all live OTP records
        dispatcher: Delivers issued codes
        limiter: Per-phone throttle for issuance
        country_code: Country code used to address SMS

    Returns:
        FastAPI router with /otp/issue and /otp/verify
    """
    router = APIRouter(prefix="/otp", tags=["OTP"])
    code_pattern = re.compile(rf"^[0-9]{{{guard.config.length}}}$")

    @router.post("/issue")
    async def issue_otp(body: OTPIssueRequest):
        try:
            phone = normalize_mobile(body.phone_number)
        except InvalidInput:
            return UserErrors.invalid_phone()

        quota = limiter.check(phone)
        if not quota.allowed:
            logger.warning(
                "OTP issue rate limited",
                phone=mask_phone(phone),
                used=quota.used,
                reset_at=quota.reset_at,
            )
            return UserErrors.rate_limited(quota.retry_after)

        code = guard.issue(phone)
        result = await dispatcher.dispatch(to_e164(phone, country_code), code)

        if not result.delivered:
            guard.revoke(phone)
            return UserErrors.delivery_failed(f"OTP delivery failed: {result.error}")

        content = {
            "success": True,
            "message": "OTP sent successfully",
            "delivered": result.delivered,
            "channel": result.sink,
            "demo": result.demo,
        }
        if result.demo:
            content["code"] = code
        return JSONResponse(status_code=200, content=content)

    @router.post("/verify")
    async def verify_otp(body: OTPVerifyRequest):
        try:
            phone = normalize_mobile(body.phone_number)
        except InvalidInput:
            return UserErrors.invalid_phone()

        code = body.code.strip()
        if not code_pattern.match(code):
            return UserErrors.invalid_code()

        result = guard.verify(phone, code)

        if result.outcome is VerifyOutcome.SUCCESS:
            limiter.reset(phone)
            return JSONResponse(
                status_code=200,
                content={"success": True, "message": "OTP verified successfully"},
            )
        if result.outcome is VerifyOutcome.MISMATCH:
            return UserErrors.otp_mismatch(result.attempts_remaining)
        return UserErrors.otp_unavailable()

    return router
