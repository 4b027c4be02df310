"""
Application Factory
===================
Composition root: builds the OTP guard, notification sinks, storage and
routers, and wires them into a FastAPI app.

Usage:
    from enroll_core.app import create_app

    app = create_app()  # Uses environment variables
"""

from contextlib import asynccontextmanager
from typing import Callable, List, Optional, Tuple
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine
import structlog

from enroll_core.api.candidates import create_candidates_router, generate_candidate_id
from enroll_core.api.otp import create_otp_router
from enroll_core.config import Settings
from enroll_core.database import create_async_engine, create_session_factory, init_models, close_engine
from enroll_core.errors import register_error_handlers
from enroll_core.health import create_health_router
from enroll_core.logs import setup_logging, RequestLoggingMiddleware
from enroll_core.middleware import setup_cors
from enroll_core.notify.base import NotificationSink
from enroll_core.notify.dispatcher import OTPDispatcher
from enroll_core.notify.gateway import GatewaySmsSink
from enroll_core.otp.guard import OTPGuard
from enroll_core.rate_limit.in_memory import InMemoryRateLimiter
from enroll_core.storage.base import CandidateStorage
from enroll_core.storage.memory import MemoryCandidateStorage
from enroll_core.storage.sql import SqlCandidateStorage

logger = structlog.get_logger(__name__)


def build_sinks(settings: Settings) -> List[NotificationSink]:
    """Create the configured delivery sinks, in the order they are tried."""
    sinks: List[NotificationSink] = []
    if settings.sms_gateway_url:
        sinks.append(GatewaySmsSink(
            url=settings.sms_gateway_url,
            api_key=settings.sms_gateway_api_key,
            sender_id=settings.sms_sender_id,
        ))
    return sinks


async def open_storage(settings: Settings) -> Tuple[CandidateStorage, Optional[AsyncEngine]]:
    """
    Open candidate storage.

    Uses SQL storage when DATABASE_URL is set and reachable, otherwise
    falls back to in-memory storage.

    Returns:
        Tuple of (storage, engine or None)
    """
    if not settings.database_url:
        logger.warning("DATABASE_URL not provided, using in-memory storage")
        return MemoryCandidateStorage(), None

    engine = create_async_engine(settings.database_url)
    try:
        await init_models(engine)
    except Exception as e:
        logger.error("Failed to connect to database, falling back to in-memory storage", error=str(e))
        await close_engine(engine)
        return MemoryCandidateStorage(), None

    logger.info("Database connected")
    return SqlCandidateStorage(create_session_factory(engine)), engine


def create_app(
    settings: Optional[Settings] = None,
    guard: Optional[OTPGuard] = None,
    dispatcher: Optional[OTPDispatcher] = None,
    storage: Optional[CandidateStorage] = None,
    limiter: Optional[InMemoryRateLimiter] = None,
    candidate_id_factory: Optional[Callable[[], str]] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Build the FastAPI application.

    Any component passed in is used as-is; the rest are built from
    settings.

    Args:
        settings: Service settings (defaults to Settings.from_env())
        guard: OTP guard
        dispatcher: OTP dispatcher
        storage: Candidate storage; skips database setup when given
        limiter: Rate limiter for OTP issuance
        candidate_id_factory: Produces public candidate ids
        configure_logging: Whether to configure structlog

    Returns:
        FastAPI app
    """
    settings = settings or Settings.from_env()
    if configure_logging:
        setup_logging(settings.service_name, settings.log_level, settings.log_json)

    guard = guard or OTPGuard(settings.otp_config)
    dispatcher = dispatcher or OTPDispatcher(
        build_sinks(settings),
        demo_fallback=settings.sms_demo_fallback,
        template=settings.otp_message_template,
        ttl_seconds=guard.config.ttl_seconds,
    )
    limiter = limiter or InMemoryRateLimiter(
        rate=settings.otp_issue_rate,
        window=settings.otp_issue_window,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = None
        if storage is None:
            app.state.storage, engine = await open_storage(settings)
        await dispatcher.initialize()
        logger.info("Service started", service=settings.service_name, storage=app.state.storage.name)
        try:
            yield
        finally:
            await dispatcher.close()
            await app.state.storage.close()
            if engine is not None:
                await close_engine(engine)
            logger.info("Service stopped", service=settings.service_name)

    app = FastAPI(title=settings.service_name, version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    app.state.guard = guard
    app.state.dispatcher = dispatcher
    if storage is not None:
        app.state.storage = storage

    register_error_handlers(app)
    setup_cors(app, settings.cors_origins)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(create_health_router(settings.service_name, settings.version))
    app.include_router(create_otp_router(guard, dispatcher, limiter, settings.default_country_code))
    app.include_router(create_candidates_router(candidate_id_factory or generate_candidate_id))

    return app
