# /mobilehub/utils/dependencies.py

import secrets
import structlog
from fastapi import Request, HTTPException

from mobilehub.config.settings import settings
from mobilehub.services.security_service import SecurityService
from mobilehub.utils.metrics import webhook_signature_counter
from mobilehub.utils.request_utils import get_remote_address

log = structlog.get_logger(__name__)

async def verify_webhook_signature(request: Request) -> bytes:
    """
    Returns the raw request body. When a webhook secret is configured the
    X-Hub-Signature-256 header must carry a matching HMAC-SHA256 digest.
    """
    body = await request.body()
    if not settings.webhook_secret:
        return body

    signature = request.headers.get("x-hub-signature-256", "")
    if not SecurityService.verify_webhook_signature(body, signature, settings.webhook_secret):
        webhook_signature_counter.labels(status="invalid").inc()
        log.error("Invalid webhook signature.", client_ip=get_remote_address(request), signature=signature[:50])
        raise HTTPException(status_code=403, detail="Invalid signature")
    webhook_signature_counter.labels(status="valid").inc()
    log.debug("Webhook signature verified successfully.")
    return body

async def verify_metrics_access(request: Request):
    if settings.api_key:
        provided_key = request.headers.get("X-API-KEY")
        if not (provided_key and secrets.compare_digest(provided_key, settings.api_key)):
            raise HTTPException(status_code=403, detail="Invalid or missing API key")
