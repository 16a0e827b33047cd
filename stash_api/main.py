from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stash_api.api.deps import check_startup_configuration
from stash_api.api.routers.ai import router as ai_router
from stash_api.api.routers.auth import router as auth_router
from stash_api.api.routers.billing import router as billing_router
from stash_api.api.routers.health import router as health_router
from stash_api.api.routers.payments import router as payments_router
from stash_api.api.routers.webhooks import router as webhooks_router
from stash_api.domain.exceptions import (
    AuthError,
    ConfigurationError,
    DomainError,
    ExternalServiceError,
    ForbiddenError,
    InvalidRequestError,
    SignatureVerificationError,
)
from stash_api.shared.config import get_settings


logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: tuple[tuple[type[DomainError], int], ...] = (
    (ConfigurationError, 500),
    (AuthError, 401),
    (ForbiddenError, 403),
    (InvalidRequestError, 400),
    (SignatureVerificationError, 400),
    (ExternalServiceError, 502),
)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    catalog = check_startup_configuration()
    logger.info(
        "startup: ready stripe_mode=%s prices=%s database=%s classifier=%s",
        settings.stripe_mode,
        len(catalog.entries),
        bool(settings.database_url),
        bool(settings.openai_api_key),
    )
    yield


def status_code_for(exc: DomainError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


app = FastAPI(title="Stash API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def handle_domain_error(_request: Request, exc: DomainError):
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("request_failed: %s error=%s", type(exc).__name__, exc)
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def handle_validation_error(_request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message, "details": jsonable_errors(errors)})


def jsonable_errors(errors) -> list[dict]:
    return [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": str(error.get("msg", ""))}
        for error in errors
    ]


app.include_router(health_router)
app.include_router(billing_router)
app.include_router(payments_router)
app.include_router(auth_router)
app.include_router(ai_router)
app.include_router(webhooks_router)
