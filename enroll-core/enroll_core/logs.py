"""
Structured Logging
==================
structlog configuration and request/response logging for the service.

Usage:
    from enroll_core.logs import setup_logging, RequestLoggingMiddleware

    # Setup at startup
    setup_logging(service_name="enroll-portal")

    # Add middleware
    app.add_middleware(RequestLoggingMiddleware)
"""

import logging
import sys
import time
import uuid
import structlog

logger = structlog.get_logger("http")


def setup_logging(
    service_name: str,
    level: str = "INFO",
    json_output: bool = True,
) -> None:
    """
    Configure structlog on top of stdlib logging.

    Args:
        service_name: Name of the service, bound to every event
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Whether to render JSON (for production)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service=service_name)
    structlog.get_logger(__name__).info("Logging configured", service=service_name, level=level)


class RequestLoggingMiddleware:
    """
    ASGI middleware for request/response logging.

    Binds a short request id into the structlog context for the duration
    of the request and echoes it back in ``X-Request-ID``.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        req_id = headers.get(b"x-request-id", b"").decode()[:64] or str(uuid.uuid4())[:8]

        method = scope.get("method", "")
        path = scope.get("path", "")

        client = scope.get("client") or ("", 0)
        client_ip = client[0]
        forwarded = headers.get(b"x-forwarded-for", b"").decode()
        if forwarded:
            client_ip = forwarded.split(",")[0].strip()

        structlog.contextvars.bind_contextvars(request_id=req_id)
        start_time = time.time()
        logger.info("Request", method=method, path=path, client_ip=client_ip)

        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                message.setdefault("headers", [])
                message["headers"] = list(message["headers"]) + [
                    (b"x-request-id", req_id.encode())
                ]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            logger.exception("Unhandled error", method=method, path=path)
            raise
        finally:
            duration_ms = int((time.time() - start_time) * 1000)
            log = logger.info if status_code < 400 else logger.warning if status_code < 500 else logger.error
            log(
                "Response",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=duration_ms,
            )
            structlog.contextvars.unbind_contextvars("request_id")
