from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse

from stash_api.api.deps import get_process_stripe_webhook_use_case
from stash_api.api.schemas.webhooks import StripeWebhookResponse
from stash_api.application.dto.billing import StripeWebhookInput
from stash_api.application.use_cases.process_stripe_webhook import ProcessStripeWebhookUseCase
from stash_api.domain.exceptions import SignatureVerificationError


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/stripe/webhook", response_model=StripeWebhookResponse)
@router.post("/webhook", response_model=StripeWebhookResponse, include_in_schema=False)
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None, alias="Stripe-Signature"),
    use_case: ProcessStripeWebhookUseCase = Depends(get_process_stripe_webhook_use_case),
):
    payload = await request.body()
    if not stripe_signature:
        return PlainTextResponse("Webhook Error: missing Stripe-Signature header", status_code=400)

    # Stripe retrieves and the upsert block; keep them off the event loop.
    command = StripeWebhookInput(signature=stripe_signature, payload=payload)
    try:
        output = await run_in_threadpool(use_case.execute, command)
    except SignatureVerificationError as exc:
        logger.warning("stripe_webhook: signature_failed error=%s", exc)
        return PlainTextResponse(f"Webhook Error: {exc}", status_code=400)
    except Exception:
        logger.exception("stripe_webhook: processing_failed")
        return PlainTextResponse("Webhook handler failed", status_code=500)

    return StripeWebhookResponse(received=True, event_type=output.event_type, handled=output.handled)
