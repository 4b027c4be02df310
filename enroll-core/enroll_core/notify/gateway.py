"""
HTTP SMS Gateway Sink
=====================
Delivers messages through a generic HTTP SMS gateway.

The gateway is expected to accept ``POST <url>`` with a JSON body
``{"to", "message", "sender_id"}`` and answer 2xx on acceptance,
optionally returning ``{"id": ...}``.
"""

import logging
from typing import Any, Dict, Optional
import httpx
import structlog
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential, before_sleep_log

from enroll_core.messaging.phone_utils import mask_phone
from .base import NotificationSink, DeliveryResult, DeliveryStatus
from .exceptions import (
    GatewayError,
    GatewayUnavailableError,
    GatewayTimeoutError,
    GatewayAuthError,
    GatewayRejectedError,
)

logger = structlog.get_logger(__name__)
retry_logger = logging.getLogger(__name__)


class GatewaySmsSink(NotificationSink):
    """
    SMS sink backed by an HTTP gateway.

    Features:
    - Connection pooling (via httpx.AsyncClient)
    - Retries on network errors and 5xx responses
    - Failures reported as DeliveryResult, not raised
    """

    name = "gateway"

    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        sender_id: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = 3,
        backoff: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            url: Gateway send endpoint
            api_key: Bearer token for the gateway
            sender_id: Alphanumeric sender ID passed through to the gateway
            timeout: Per-request timeout in seconds
            max_attempts: Attempts per message, including the first
            backoff: Exponential backoff multiplier in seconds
            transport: Optional httpx transport (used by tests)
        """
        super().__init__()
        self.url = url
        self.api_key = api_key
        self.sender_id = sender_id
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff = backoff
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Create HTTP client with auth."""
        headers = {
            "User-Agent": "enroll-core/gateway-sink",
            "Accept": "application/json",
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=self.timeout,
            transport=self._transport,
        )
        await super().initialize()

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        await super().close()

    def _map_exception(self, exc: httpx.HTTPError) -> GatewayError:
        """Map httpx exceptions to gateway exceptions."""
        if isinstance(exc, httpx.TimeoutException):
            return GatewayTimeoutError("Request timed out", gateway=self.name)
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            text = exc.response.text
            if status in (401, 403):
                return GatewayAuthError("Unauthorized", gateway=self.name, status_code=status)
            if status >= 500:
                return GatewayUnavailableError("Server error", gateway=self.name, status_code=status, details=text)
            return GatewayRejectedError(f"HTTP {status} Error", gateway=self.name, status_code=status, details=text)
        return GatewayUnavailableError(f"Failed to connect: {exc}", gateway=self.name)

    async def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise self._map_exception(e)

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    async def send(self, to: str, message: str) -> DeliveryResult:
        """Send SMS via the gateway."""
        if not self._client:
            raise RuntimeError("Sink not initialized")

        payload = {"to": to, "message": message}
        if self.sender_id:
            payload["sender_id"] = self.sender_id

        retrying = AsyncRetrying(
            retry=retry_if_exception_type(GatewayUnavailableError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff, min=0, max=10),
            before_sleep=before_sleep_log(retry_logger, logging.WARNING),
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    data = await self._post(payload)
        except GatewayError as e:
            logger.error(
                "Gateway send failed",
                to=mask_phone(to),
                error=e.message,
                status_code=e.status_code,
            )
            return DeliveryResult(
                success=False,
                sink=self.name,
                status=DeliveryStatus.FAILED,
                error_message=e.message,
            )

        message_id = data.get("id") or data.get("message_id")
        logger.info("Gateway accepted message", to=mask_phone(to), message_id=message_id)
        return DeliveryResult(
            success=True,
            sink=self.name,
            status=DeliveryStatus.SENT,
            message_id=str(message_id) if message_id is not None else None,
        )

    async def health_check(self) -> bool:
        return self._client is not None
