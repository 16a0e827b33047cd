from __future__ import annotations

from fastapi import APIRouter, Depends

from stash_api.api.deps import (
    get_create_customer_use_case,
    get_create_payment_intent_use_case,
    get_get_payment_intent_use_case,
)
from stash_api.api.schemas.payments import (
    CreateCustomerRequest,
    CreateCustomerResponse,
    CreatePaymentIntentRequest,
    CreatePaymentIntentResponse,
    PaymentIntentStatusResponse,
)
from stash_api.application.dto.billing import CreateCustomerInput, CreatePaymentIntentInput
from stash_api.application.use_cases.create_customer import CreateCustomerUseCase
from stash_api.application.use_cases.create_payment_intent import CreatePaymentIntentUseCase
from stash_api.application.use_cases.get_payment_intent import GetPaymentIntentUseCase


router = APIRouter()


@router.post("/create-payment-intent", response_model=CreatePaymentIntentResponse)
def create_payment_intent(
    req: CreatePaymentIntentRequest,
    use_case: CreatePaymentIntentUseCase = Depends(get_create_payment_intent_use_case),
):
    output = use_case.execute(
        CreatePaymentIntentInput(
            amount=req.amount,
            currency=req.currency,
            customer_id=req.customer_id,
            metadata=req.metadata or {},
        )
    )
    return CreatePaymentIntentResponse(
        client_secret=output.client_secret,
        payment_intent_id=output.payment_intent_id,
    )


@router.post("/create-customer", response_model=CreateCustomerResponse)
def create_customer(
    req: CreateCustomerRequest,
    use_case: CreateCustomerUseCase = Depends(get_create_customer_use_case),
):
    output = use_case.execute(
        CreateCustomerInput(email=req.email, name=req.name, metadata=req.metadata or {})
    )
    return CreateCustomerResponse(customer_id=output.customer_id, customer=output.customer)


@router.get("/payment-intent/{payment_intent_id}", response_model=PaymentIntentStatusResponse)
def get_payment_intent(
    payment_intent_id: str,
    use_case: GetPaymentIntentUseCase = Depends(get_get_payment_intent_use_case),
):
    output = use_case.execute(payment_intent_id=payment_intent_id)
    return PaymentIntentStatusResponse(status=output.status, payment_intent=output.payment_intent)
