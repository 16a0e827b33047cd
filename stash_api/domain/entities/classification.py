from __future__ import annotations

from dataclasses import dataclass


DEFAULT_CATEGORY = "General"


@dataclass(frozen=True)
class ClassificationResult:
    title: str
    description: str
    tags: list[str]
    suggested_folders: list[str]
    category: str


@dataclass(frozen=True)
class ClassificationPrompt:
    system: str
    user_text: str
    image_base64: str | None
