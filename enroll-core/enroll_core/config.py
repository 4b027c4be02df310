"""
Service Configuration
=====================
Settings for the enrollment service, read from environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from enroll_core.notify.dispatcher import DEFAULT_TEMPLATE
from enroll_core.otp.models import OTPConfig

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _get_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUE_VALUES


@dataclass
class Settings:
    """Configuration for the enrollment service."""
    service_name: str = "enroll-portal"
    version: str = "0.1.0"
    log_level: str = "INFO"
    log_json: bool = True

    # Storage; unset means in-memory
    database_url: Optional[str] = None

    # OTP
    otp_length: int = 4
    otp_ttl_seconds: int = 300  # 5 minutes
    otp_max_attempts: int = 3
    otp_issue_rate: int = 3  # issues per phone per window
    otp_issue_window: int = 60
    otp_message_template: str = DEFAULT_TEMPLATE

    # Notification sinks
    sms_gateway_url: Optional[str] = None
    sms_gateway_api_key: Optional[str] = None
    sms_sender_id: Optional[str] = None
    sms_demo_fallback: bool = True
    default_country_code: str = "91"

    cors_origins: List[str] = field(default_factory=lambda: [
        "http://localhost:5000",
        "http://127.0.0.1:5000",
    ])

    @property
    def otp_config(self) -> OTPConfig:
        return OTPConfig(
            length=self.otp_length,
            ttl_seconds=self.otp_ttl_seconds,
            max_attempts=self.otp_max_attempts,
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from (defaults to os.environ)

        Returns:
            Settings

        Raises:
            ValueError: If a numeric variable is malformed
        """
        env = os.environ if env is None else env
        defaults = cls()

        origins = env.get("CORS_ORIGINS")
        cors_origins = (
            [o.strip() for o in origins.split(",") if o.strip()]
            if origins else defaults.cors_origins
        )

        return cls(
            service_name=env.get("SERVICE_NAME", defaults.service_name),
            log_level=env.get("LOG_LEVEL", defaults.log_level),
            log_json=_get_bool(env, "LOG_JSON", defaults.log_json),
            database_url=env.get("DATABASE_URL") or None,
            otp_length=_get_int(env, "OTP_LENGTH", defaults.otp_length),
            otp_ttl_seconds=_get_int(env, "OTP_TTL_SECONDS", defaults.otp_ttl_seconds),
            otp_max_attempts=_get_int(env, "OTP_MAX_ATTEMPTS", defaults.otp_max_attempts),
            otp_issue_rate=_get_int(env, "OTP_ISSUE_RATE", defaults.otp_issue_rate),
            otp_issue_window=_get_int(env, "OTP_ISSUE_WINDOW", defaults.otp_issue_window),
            otp_message_template=env.get("OTP_MESSAGE_TEMPLATE", defaults.otp_message_template),
            sms_gateway_url=env.get("SMS_GATEWAY_URL") or None,
            sms_gateway_api_key=env.get("SMS_GATEWAY_API_KEY") or None,
            sms_sender_id=env.get("SMS_SENDER_ID") or None,
            sms_demo_fallback=_get_bool(env, "SMS_DEMO_FALLBACK", defaults.sms_demo_fallback),
            default_country_code=env.get("DEFAULT_COUNTRY_CODE", defaults.default_country_code),
            cors_origins=cors_origins,
        )
