from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AnalyzeContentInput:
    content_type: str
    url: str | None
    metadata: dict[str, Any] = field(default_factory=dict)
    image_base64: str | None = None
    folder_hints: list[str] = field(default_factory=list)
