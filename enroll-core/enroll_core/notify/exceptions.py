from typing import Optional, Any


class GatewayError(Exception):
    """Base exception for SMS gateway communication errors."""
    def __init__(self, message: str, gateway: str = "unknown", status_code: Optional[int] = None, details: Any = None):
        self.message = message
        self.gateway = gateway
        self.status_code = status_code
        self.details = details
        super().__init__(f"[{gateway}] {message} (Status: {status_code})")


class GatewayUnavailableError(GatewayError):
    """Raised when the gateway is unreachable or answers with a 5xx."""
    pass


class GatewayTimeoutError(GatewayUnavailableError):
    """Raised specifically on timeouts."""
    pass


class GatewayAuthError(GatewayError):
    """Raised when the gateway rejects our credentials (401/403)."""
    pass


class GatewayRejectedError(GatewayError):
    """Raised when the gateway refuses the message (other 4xx)."""
    pass
