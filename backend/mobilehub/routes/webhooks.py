# /mobilehub/routes/webhooks.py

import json
import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from mobilehub.config import strings
from mobilehub.config.settings import settings
from mobilehub.models.api import WebhookPayload, WhatsAppMessageData
from mobilehub.models.domain import Intent, InboundMessage, MessageAnalysis
from mobilehub.services.inventory_matcher import inventory_matcher
from mobilehub.services.inventory_store import InventoryStoreError
from mobilehub.services.message_analyzer import analyze_message
from mobilehub.services.response_formatter import response_formatter
from mobilehub.services.security_service import EnhancedSecurityService
from mobilehub.utils.dependencies import verify_webhook_signature
from mobilehub.utils.metrics import messages_analyzed_counter, response_time_histogram
from mobilehub.utils.rate_limiter import limiter

# Inbound WhatsApp messages forwarded by the workflow engine. Each message is
# analysed into an intent plus entities, and the response tells the engine
# which action to take and which search URL to call.

router = APIRouter(
    prefix="/webhook",
    tags=["Webhooks"]
)

log = structlog.get_logger(__name__)


def _parse_payload(body: bytes) -> WebhookPayload:
    try:
        data = json.loads(body.decode("utf-8") or "null")
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    try:
        return WebhookPayload.model_validate(data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid webhook payload: {e.errors()[0]['msg']}")


def _parse_message(payload: WebhookPayload) -> InboundMessage:
    try:
        data = WhatsAppMessageData.model_validate(payload.data or {})
        text = EnhancedSecurityService.validate_message_content(data.message)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise HTTPException(status_code=400, detail=f"Invalid message data: {fields}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return InboundMessage(sender=data.sender, name=data.name, text=text, message_id=data.message_id)


async def _build_reply(message: InboundMessage, analysis: MessageAnalysis) -> dict:
    """Runs the matcher and formatter so the engine can deliver a reply directly."""
    if analysis.intent == Intent.GREETING or analysis.query is None:
        name = f" {message.name}" if message.name else ""
        text = strings.WELCOME_MESSAGE.format(name=name, store_name=settings.store_name)
        return {"text": text, "count": 0, "data": [], "suggestions": []}

    result = await inventory_matcher.match(analysis.query)
    formatted = response_formatter.format_match_result(result, analysis.intent)
    structured = formatted["structured"]
    return {
        "text": formatted["text"],
        "count": structured["count"],
        "data": structured["data"],
        "suggestions": structured["suggestions"],
    }


@router.get("/whatsapp")
async def webhook_status():
    """Webhook health check for the workflow engine."""
    return {
        "status": "active",
        "service": f"{settings.store_name} WhatsApp Webhook",
        "endpoints": {
            "webhook": f"POST {settings.api_prefix}/webhook/whatsapp",
            "search": f"GET {settings.api_prefix}/phones/search",
            "catalog": f"GET {settings.api_prefix}/n8n/available-phones",
        },
    }


@router.post("/whatsapp")
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
async def handle_whatsapp_webhook(
    request: Request,
    verified_body: bytes = Depends(verify_webhook_signature)
):
    """Analyse one inbound WhatsApp message."""
    with response_time_histogram.labels(endpoint="whatsapp_webhook").time():
        payload = _parse_payload(verified_body)

        if payload.type != "message":
            log.debug("Ignoring non-message webhook event", event_type=payload.type)
            return JSONResponse({"success": True, "action": "ignored"})

        message = _parse_message(payload)
        analysis = analyze_message(
            message.text,
            result_limit=settings.conversational_result_limit,
            search_path=f"{settings.api_prefix}/phones/search",
        )
        messages_analyzed_counter.labels(intent=analysis.intent.value).inc()

        entities = analysis.entities
        log.info(
            "WhatsApp inquiry analysed",
            sender=EnhancedSecurityService.sanitize_phone_number(message.sender) or message.sender,
            message_id=message.message_id,
            intent=analysis.intent.value,
            brand=entities.brand,
            model=entities.model,
            budget=entities.budget,
        )

        response = {
            "success": True,
            "customerPhone": message.sender,
            "customerName": message.name,
            "message": message.text,
            "analysis": {
                "intent": analysis.intent.value,
                "brand": entities.brand,
                "model": entities.model,
                "budget": entities.budget,
                "keywords": entities.keywords,
            },
            "suggestedAction": analysis.suggested_action,
            "apiEndpoint": analysis.api_endpoint,
        }

        if settings.webhook_inline_reply:
            try:
                response["reply"] = await _build_reply(message, analysis)
            except InventoryStoreError as e:
                log.error("Inline reply failed, returning analysis only", sender=message.sender, error=str(e))
                response["reply"] = {
                    "text": strings.SEARCH_UNAVAILABLE_MESSAGE,
                    "count": 0,
                    "data": [],
                    "suggestions": [],
                }

        return JSONResponse(response)
