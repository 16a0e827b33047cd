from __future__ import annotations

from .base import CamelModel


class StripeWebhookResponse(CamelModel):
    received: bool = True
    event_type: str
    handled: bool
