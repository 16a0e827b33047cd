from __future__ import annotations

from typing import Any

from pydantic import Field

from .base import CamelModel


class AnalyzeRequest(CamelModel):
    content_type: str = Field("url", alias="type")
    url: str | None = None
    metadata: dict[str, Any] | None = None
    image_base64: str | None = None
    current_folders: list[Any] | None = None
    preferred_folders: list[Any] | None = None

    def folder_hints(self) -> list[Any]:
        if self.current_folders is not None:
            return self.current_folders
        return self.preferred_folders or []


class ClassificationResponse(CamelModel):
    title: str
    description: str
    tags: list[str]
    suggested_folders: list[str]
    category: str
