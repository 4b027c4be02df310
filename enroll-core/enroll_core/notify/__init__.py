"""
Notification Sinks
==================
Delivery channels for OTP messages.
"""

from .base import NotificationSink, DeliveryResult, DeliveryStatus
from .demo import DemoEchoSink
from .gateway import GatewaySmsSink
from .dispatcher import OTPDispatcher, DispatchResult, DEFAULT_TEMPLATE
from .exceptions import (
    GatewayError,
    GatewayUnavailableError,
    GatewayTimeoutError,
    GatewayAuthError,
    GatewayRejectedError,
)

__all__ = [
    # Base
    "NotificationSink",
    "DeliveryResult",
    "DeliveryStatus",
    # Sinks
    "DemoEchoSink",
    "GatewaySmsSink",
    # Dispatch
    "OTPDispatcher",
    "DispatchResult",
    "DEFAULT_TEMPLATE",
    # Exceptions
    "GatewayError",
    "GatewayUnavailableError",
    "GatewayTimeoutError",
    "GatewayAuthError",
    "GatewayRejectedError",
]
