"""
OTP Dispatcher
==============
Routes OTP messages to the configured sinks, with demo fallback.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence
import structlog

from enroll_core.messaging.phone_utils import mask_phone
from .base import NotificationSink
from .demo import DemoEchoSink

logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATE = "Your verification code is {code}. It is valid for {minutes} minutes."


@dataclass
class DispatchResult:
    """Outcome of delivering one OTP."""
    delivered: bool
    sink: Optional[str] = None
    demo: bool = False
    error: Optional[str] = None


class OTPDispatcher:
    """
    Sends OTP messages through an ordered list of sinks.

    Tries each sink in turn and stops at the first success. When every
    sink fails (or none is configured) and demo fallback is enabled, the
    demo echo sink takes the message.
    """

    def __init__(
        self,
        sinks: Optional[Sequence[NotificationSink]] = None,
        demo_fallback: bool = True,
        template: str = DEFAULT_TEMPLATE,
        ttl_seconds: int = 300,
    ):
        self.sinks: List[NotificationSink] = list(sinks or [])
        self.demo_fallback = demo_fallback
        self.template = template
        self.ttl_seconds = ttl_seconds
        self._demo = DemoEchoSink()

    @property
    def all_sinks(self) -> List[NotificationSink]:
        if self.demo_fallback:
            return self.sinks + [self._demo]
        return list(self.sinks)

    async def initialize(self) -> None:
        for sink in self.all_sinks:
            await sink.initialize()

    async def close(self) -> None:
        for sink in self.all_sinks:
            await sink.close()

    def render(self, code: str) -> str:
        minutes = max(self.ttl_seconds // 60, 1)
        return self.template.format(code=code, minutes=minutes)

    async def dispatch(self, to: str, code: str) -> DispatchResult:
        """
        Deliver an OTP.

        Args:
            to: Recipient phone number (E.164 format)
            code: The issued code

        Returns:
            DispatchResult
        """
        message = self.render(code)
        last_error = None

        for sink in self.all_sinks:
            try:
                result = await sink.send(to, message)
            except Exception as e:
                logger.error("Sink raised during send", sink=sink.name, error=str(e), exc_info=True)
                last_error = str(e)
                continue

            if result.success:
                if sink.echoes_code and self.sinks:
                    logger.warning("Falling back to demo sink", to=mask_phone(to))
                return DispatchResult(delivered=True, sink=sink.name, demo=sink.echoes_code)

            last_error = result.error_message
            logger.warning("Sink failed to deliver OTP", sink=sink.name, error=last_error)

        logger.error("OTP could not be delivered", to=mask_phone(to), error=last_error)
        return DispatchResult(delivered=False, error=last_error or "No notification sink configured")
