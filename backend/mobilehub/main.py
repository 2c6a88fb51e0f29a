# /mobilehub/main.py

import os
import time
import uvicorn
import asyncio
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from mobilehub.config.settings import settings
from mobilehub.services.inventory_store import InventoryStoreError
from mobilehub.utils.lifecycle import lifespan
from mobilehub.utils.metrics import response_time_histogram
from mobilehub.utils.rate_limiter import limiter
from mobilehub.routes import n8n, phones, public, webhooks

log = structlog.get_logger(__name__)

app = FastAPI(
    title=f"{settings.store_name} WhatsApp Assistant",
    version="1.0.0",
    description="WhatsApp message intent analysis and phone inventory matching",
    lifespan=lifespan,
    openapi_url=f"{settings.api_prefix}/openapi.json" if settings.environment != "production" else None,
    docs_url=f"{settings.api_prefix}/docs" if settings.environment != "production" else None,
    redoc_url=f"{settings.api_prefix}/redoc" if settings.environment != "production" else None,
)

# --- Rate Limiting ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# --- Error Responses ---
# Every error leaves the service as {"success": false, "error": <message>}.

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        {"success": False, "error": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    fields = ", ".join(str(err["loc"][-1]) for err in errors if err.get("loc"))
    return JSONResponse({"success": False, "error": f"Invalid request: {fields}"}, status_code=400)

@app.exception_handler(InventoryStoreError)
async def inventory_store_exception_handler(request: Request, exc: InventoryStoreError):
    log.error("Inventory store failure", path=request.url.path, error=str(exc))
    return JSONResponse({"success": False, "error": "Failed to query inventory"}, status_code=500)

# --- Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.environment != "test":
    allowed_hosts = [host.strip() for host in settings.allowed_hosts.split(",") if host.strip()]
    if allowed_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SlowAPIMiddleware)

@app.middleware("http")
async def performance_middleware(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response_time_histogram.labels(endpoint=request.url.path).observe(process_time)
    response.headers["X-Process-Time"] = str(process_time)
    return response

@app.middleware("http")
async def timeout_middleware(request: Request, call_next):
    try:
        return await asyncio.wait_for(call_next(request), timeout=30.0)
    except asyncio.TimeoutError:
        return JSONResponse({"success": False, "error": "Request timed out"}, status_code=504)

# --- API Routers ---
app.include_router(public.router)
app.include_router(webhooks.router, prefix=settings.api_prefix)
app.include_router(phones.router, prefix=settings.api_prefix)
app.include_router(n8n.router, prefix=settings.api_prefix)

# --- Main Entry Point for Uvicorn (for local development) ---
if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "127.0.0.1")

    uvicorn.run(
        "mobilehub.main:app",
        host=host,
        port=port,
        reload=True if settings.environment == "development" else False,
        workers=settings.workers if settings.environment == "production" else 1
    )
