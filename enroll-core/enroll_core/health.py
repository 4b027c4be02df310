"""
Health Check Module
===================
Health endpoints with component status for the enrollment service.
"""

import time
from typing import Dict, Optional
from fastapi import APIRouter, Request, Response
from pydantic import BaseModel
from enum import Enum
import structlog

logger = structlog.get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    status: str
    latency_ms: Optional[float] = None
    error: Optional[str] = None
    detail: Optional[Dict[str, object]] = None


class HealthResponse(BaseModel):
    status: HealthStatus
    service: str
    version: str
    components: Dict[str, ComponentHealth]
    timestamp: float


async def check_storage(storage) -> ComponentHealth:
    """Check candidate storage connectivity and latency."""
    try:
        start = time.time()
        await storage.ping()
        latency = (time.time() - start) * 1000
        return ComponentHealth(
            status="connected",
            latency_ms=round(latency, 2),
            detail={"backend": storage.name},
        )
    except Exception as e:
        logger.error("Storage health check failed", error=str(e))
        return ComponentHealth(status="error", error=str(e))


async def check_sinks(dispatcher) -> ComponentHealth:
    """Check which notification sinks can accept messages."""
    sinks = {}
    for sink in dispatcher.all_sinks:
        try:
            sinks[sink.name] = await sink.health_check()
        except Exception as e:
            logger.error("Sink health check failed", sink=sink.name, error=str(e))
            sinks[sink.name] = False
    status = "ok" if any(sinks.values()) else "error"
    return ComponentHealth(status=status, detail=sinks)


def create_health_router(
    service_name: str,
    version: str = "0.1.0",
) -> APIRouter:
    """
    Create a health check router.

    Components are read from ``request.app.state`` (``storage``,
    ``guard``, ``dispatcher``) when present.

    Args:
        service_name: Name of the service
        version: Service version

    Returns:
        FastAPI router with /health, /health/live, and /health/ready endpoints
    """
    router = APIRouter(tags=["Health"])

    @router.get("/health", response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        """Health check with all component statuses."""
        state = request.app.state
        components: Dict[str, ComponentHealth] = {}
        overall_status = HealthStatus.HEALTHY

        storage = getattr(state, "storage", None)
        if storage is not None:
            components["storage"] = await check_storage(storage)
            if components["storage"].status == "error":
                overall_status = HealthStatus.UNHEALTHY

        guard = getattr(state, "guard", None)
        if guard is not None:
            components["otp"] = ComponentHealth(
                status="ok",
                detail={"live_records": guard.live_count()},
            )

        dispatcher = getattr(state, "dispatcher", None)
        if dispatcher is not None:
            components["notify"] = await check_sinks(dispatcher)
            if components["notify"].status == "error" and overall_status == HealthStatus.HEALTHY:
                overall_status = HealthStatus.DEGRADED

        return HealthResponse(
            status=overall_status,
            service=service_name,
            version=version,
            components=components,
            timestamp=time.time(),
        )

    @router.get("/health/live")
    async def liveness_probe():
        """Liveness probe - always returns 200 if the process is running."""
        return {"status": "alive"}

    @router.get("/health/ready")
    async def readiness_probe(request: Request):
        """Readiness probe - storage must be reachable."""
        storage = getattr(request.app.state, "storage", None)
        if storage is None:
            return Response(
                content='{"status": "not_ready", "reason": "starting"}',
                status_code=503,
                media_type="application/json",
            )
        storage_health = await check_storage(storage)
        if storage_health.status == "error":
            return Response(
                content='{"status": "not_ready", "reason": "storage_unavailable"}',
                status_code=503,
                media_type="application/json",
            )
        return {"status": "ready"}

    return router
