from __future__ import annotations

from fastapi import APIRouter, Depends

from stash_api.api.deps import (
    get_create_subscription_use_case,
    get_list_plans_use_case,
    get_optional_identity,
)
from stash_api.api.schemas.billing import (
    CreateSubscriptionRequest,
    CreateSubscriptionResponse,
    PlanResponse,
    PlansResponse,
)
from stash_api.application.dto.auth import AccessTokenPayload
from stash_api.application.dto.billing import CreateSubscriptionInput
from stash_api.application.use_cases.create_subscription import CreateSubscriptionUseCase
from stash_api.application.use_cases.list_plans import ListPlansUseCase


router = APIRouter()


@router.get("/plans", response_model=PlansResponse)
def list_plans(
    use_case: ListPlansUseCase = Depends(get_list_plans_use_case),
):
    plans = use_case.execute()
    return PlansResponse(
        plans=[PlanResponse(plan_id=plan.plan_id, prices=plan.prices) for plan in plans]
    )


@router.post("/create-subscription", response_model=CreateSubscriptionResponse)
def create_subscription(
    req: CreateSubscriptionRequest,
    identity: AccessTokenPayload | None = Depends(get_optional_identity),
    use_case: CreateSubscriptionUseCase = Depends(get_create_subscription_use_case),
):
    # Signed-in callers are billed under their session identity; the body
    # email/name are only used by clients that predate authentication.
    if identity is not None:
        user_id = identity.user_id
        email = identity.email or req.email
        name = identity.name or req.name
    else:
        user_id = None
        email = req.email
        name = req.name

    output = use_case.execute(
        CreateSubscriptionInput(
            user_id=user_id,
            plan_id=req.plan_id,
            billing_cycle=req.billing_cycle,
            email=(email or "").strip(),
            name=name,
            metadata=req.metadata or {},
        )
    )
    return CreateSubscriptionResponse(
        subscription_id=output.subscription_id,
        customer_id=output.customer_id,
        payment_intent_client_secret=output.payment_intent_client_secret,
        ephemeral_key_secret=output.ephemeral_key_secret,
    )
