from __future__ import annotations

import logging

from stash_api.application.dto.billing import FindOrCreateCustomerInput
from stash_api.application.ports.stripe_port import StripePort
from stash_api.domain.exceptions import ExternalServiceError

from .common import USER_ID_METADATA_KEY


logger = logging.getLogger(__name__)


class FindOrCreateCustomerUseCase:
    def __init__(self, *, stripe_port: StripePort):
        self._stripe_port = stripe_port

    def execute(self, command: FindOrCreateCustomerInput) -> str:
        existing = self._stripe_port.find_customer_by_email(email=command.email)
        if existing is not None:
            if command.user_id and not existing.metadata.get(USER_ID_METADATA_KEY):
                self._tag_customer(customer_id=existing.id, user_id=command.user_id)
            return existing.id

        metadata = {USER_ID_METADATA_KEY: command.user_id} if command.user_id else {}
        customer = self._stripe_port.create_customer(
            email=command.email,
            name=command.name,
            metadata=metadata,
        )
        logger.info(
            "find_or_create_customer: created customer_id=%s user_id=%s",
            customer.id,
            command.user_id,
        )
        return customer.id

    def _tag_customer(self, *, customer_id: str, user_id: str) -> None:
        try:
            self._stripe_port.update_customer_metadata(
                customer_id=customer_id,
                metadata={USER_ID_METADATA_KEY: user_id},
            )
        except ExternalServiceError:
            logger.warning(
                "find_or_create_customer: tag_failed customer_id=%s user_id=%s",
                customer_id,
                user_id,
                exc_info=True,
            )
