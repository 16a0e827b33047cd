from __future__ import annotations

from fastapi import APIRouter

from stash_api.api.schemas.health import HealthResponse, RootResponse


router = APIRouter()


@router.get("/", response_model=RootResponse)
def root():
    return RootResponse(status="Server is running")


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(ok=True)
