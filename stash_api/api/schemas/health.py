from __future__ import annotations

from pydantic import BaseModel


class RootResponse(BaseModel):
    status: str


class HealthResponse(BaseModel):
    ok: bool
