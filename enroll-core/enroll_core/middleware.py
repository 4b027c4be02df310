"""
CORS Middleware Helper
=======================
CORS configuration for the portal front end.
"""

from typing import List, Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

logger = structlog.get_logger(__name__)


def setup_cors(
    app: FastAPI,
    origins: List[str],
    allow_credentials: bool = True,
    allow_methods: Optional[List[str]] = None,
    allow_headers: Optional[List[str]] = None,
) -> None:
    """
    Configure CORS middleware.

    Args:
        app: FastAPI application instance
        origins: Allowed origins
        allow_credentials: Allow cookies/auth headers (default: True)
        allow_methods: Allowed HTTP methods (default: standard REST methods)
        allow_headers: Allowed headers (default: common headers)
    """
    if "*" in origins:
        logger.warning(
            "CORS wildcard detected! This is insecure in production.",
            origins=origins,
        )
        # Browsers reject credentials with a wildcard origin
        allow_credentials = False

    if allow_methods is None:
        allow_methods = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]

    if allow_headers is None:
        allow_headers = ["Authorization", "Content-Type", "X-Request-ID"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=allow_methods,
        allow_headers=allow_headers,
    )

    logger.info("CORS configured", origins_count=len(origins))
