"""
Notification Sink Base
======================
Base classes for channels that deliver OTP messages to end users.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import structlog

logger = structlog.get_logger(__name__)


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


@dataclass
class DeliveryResult:
    """Result of a message send operation."""
    success: bool
    sink: str
    status: DeliveryStatus = DeliveryStatus.PENDING
    message_id: Optional[str] = None
    error_message: Optional[str] = None


class NotificationSink(ABC):
    """
    Abstract base class for notification sinks.

    A sink accepts (phone number, message) and reports success or failure.
    Expected delivery failures are returned as a failed DeliveryResult,
    not raised.
    """

    name: str = "base"
    echoes_code: bool = False

    def __init__(self):
        self._is_initialized = False

    async def initialize(self) -> None:
        """Initialize the sink (e.g., create HTTP clients)."""
        self._is_initialized = True
        logger.info("Notification sink initialized", sink=self.name)

    async def close(self) -> None:
        """Clean up resources (e.g., close HTTP clients)."""
        self._is_initialized = False
        logger.info("Notification sink closed", sink=self.name)

    @abstractmethod
    async def send(self, to: str, message: str) -> DeliveryResult:
        """
        Deliver a message.

        Args:
            to: Recipient phone number (E.164 format)
            message: Message content

        Returns:
            DeliveryResult
        """
        pass

    async def health_check(self) -> bool:
        """Check if the sink can accept messages."""
        return self._is_initialized
