# /mobilehub/routes/public.py

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from datetime import datetime, timezone

from mobilehub.config.settings import settings
from mobilehub.utils.dependencies import verify_metrics_access
from mobilehub.services.db_service import db_service

# Public endpoints that need no authentication: the service banner, health
# probes for the load balancer and container runtime, and Prometheus metrics
# (protected by an API key when one is configured).

router = APIRouter()

@router.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": f"{settings.store_name} WhatsApp Assistant",
        "version": "1.0.0",
        "status": "operational",
        "environment": settings.environment,
        "website": settings.site_url
    }

@router.get("/health", summary="Basic Health Check")
async def health_check():
    """Basic health check for load balancers."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc)}

@router.get("/health/ready", summary="Readiness Probe")
async def readiness_check():
    """Readiness probe; the inventory store must answer a ping."""
    if not await db_service.health_check():
        raise HTTPException(status_code=503, detail="Service not ready: database unavailable")
    return {"status": "ready"}

@router.get("/health/live", summary="Liveness Probe")
async def liveness_check():
    """Liveness probe."""
    return {"status": "alive"}

@router.get("/metrics", tags=["Monitoring"])
async def metrics(request: Request, _: bool = Depends(verify_metrics_access)):
    """Prometheus metrics endpoint."""
    return PlainTextResponse(generate_latest(), media_type=CONTENT_TYPE_LATEST)
