"""
Demo Echo Sink
==============
Sink used when no real delivery channel is configured or reachable.
"""

import uuid
import structlog

from enroll_core.messaging.phone_utils import mask_phone
from .base import NotificationSink, DeliveryResult, DeliveryStatus

logger = structlog.get_logger(__name__)


class DemoEchoSink(NotificationSink):
    """
    Accepts every message without sending it anywhere.

    The HTTP layer returns the code in the response body when this sink
    handled the dispatch, so the flow stays usable in demos.
    """

    name = "demo"
    echoes_code = True

    async def send(self, to: str, message: str) -> DeliveryResult:
        logger.warning("Demo sink used, message not delivered", to=mask_phone(to))
        return DeliveryResult(
            success=True,
            sink=self.name,
            status=DeliveryStatus.SENT,
            message_id=f"demo-{uuid.uuid4().hex[:12]}",
        )

    async def health_check(self) -> bool:
        return True
