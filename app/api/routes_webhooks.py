import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.api.dependencies import PipelineDep
from app.api.rate_limit import RATE_LIMITS, limiter
from app.bot.message_extractor import extract_message
from app.core.exceptions import InvalidPayloadError
from app.models.payment_schemas import WebhookOut

logger = logging.getLogger(__name__)
router = APIRouter()


async def _read_payload(request: Request) -> dict:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError as exc:  # JSONDecodeError or a non-UTF-8 body
            logger.error("Invalid WhatsApp webhook payload: %s", exc)
            raise InvalidPayloadError() from exc
        return payload if isinstance(payload, dict) else {}
    # Twilio posts application/x-www-form-urlencoded
    form = await request.form()
    return dict(form)


@router.post("/whatsapp/verify", response_model=WebhookOut, response_model_exclude_none=True)
@limiter.limit(RATE_LIMITS["webhook_whatsapp_inbound"])
async def whatsapp_verify(request: Request, pipeline: PipelineDep):
    """Issue a donation receipt for the transaction quoted in a WhatsApp message."""
    message = extract_message(await _read_payload(request))
    # The pipeline blocks on DB, disk and HTTP; keep it off the event loop
    result = await run_in_threadpool(pipeline.run, message["from"], message["text"])
    return JSONResponse(status_code=result.status_code, content=WebhookOut(**result.body).model_dump(exclude_none=True))
