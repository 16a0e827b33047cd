from __future__ import annotations

from typing import Protocol

from stash_api.domain.entities.classification import ClassificationPrompt


class ContentClassifierPort(Protocol):
    def classify(self, *, prompt: ClassificationPrompt) -> str:
        ...
