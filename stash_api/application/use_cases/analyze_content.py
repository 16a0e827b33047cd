from __future__ import annotations

import logging

from stash_api.application.dto.classification import AnalyzeContentInput
from stash_api.application.ports.classifier_port import ContentClassifierPort
from stash_api.domain.entities.classification import ClassificationResult
from stash_api.domain.exceptions import ExternalServiceError
from stash_api.domain.services.classification import (
    build_classification_prompt,
    build_fallback_classification,
    clean_folder_hints,
    parse_classification_reply,
)


logger = logging.getLogger(__name__)


class AnalyzeContentUseCase:
    def __init__(self, *, classifier: ContentClassifierPort | None):
        self._classifier = classifier

    def execute(self, command: AnalyzeContentInput) -> ClassificationResult:
        folder_hints = clean_folder_hints(command.folder_hints)
        fallback = build_fallback_classification(metadata=command.metadata, folder_hints=folder_hints)
        if self._classifier is None:
            return fallback

        prompt = build_classification_prompt(
            content_type=command.content_type,
            url=command.url,
            metadata=command.metadata,
            folder_hints=folder_hints,
            image_base64=command.image_base64,
        )
        try:
            reply = self._classifier.classify(prompt=prompt)
        except ExternalServiceError:
            logger.warning("analyze_content: classifier_failed type=%s", command.content_type, exc_info=True)
            return fallback

        result = parse_classification_reply(reply, fallback=fallback)
        if result is None:
            logger.warning(
                "analyze_content: unparsable_reply type=%s length=%s",
                command.content_type,
                len(reply or ""),
            )
            return fallback
        return result
