from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

from stash_api.domain.entities.classification import (
    DEFAULT_CATEGORY,
    ClassificationPrompt,
    ClassificationResult,
)


SYSTEM_INSTRUCTION = (
    "You categorize and tag user-provided content. Respond ONLY with JSON containing: "
    "title (string), description (string), tags (array of short strings), "
    "suggestedFolders (array of short strings), category (short string). "
    "When preferred folders are listed, pick suggestedFolders and category from them if one fits. "
    "Keep it concise and safe for general audiences."
)

EMPTY_PROMPT_TEXT = "Analyze this content."

FALLBACK_TITLE = "Content"
FALLBACK_DESCRIPTION = "Description"
FALLBACK_TAGS = ("tag1", "tag2")


def clean_folder_hints(folders: Iterable[Any] | None) -> list[str]:
    if not folders:
        return []
    cleaned: list[str] = []
    for folder in folders:
        if not isinstance(folder, str):
            continue
        value = folder.strip()
        if value:
            cleaned.append(value)
    return cleaned


def build_fallback_classification(
    *,
    metadata: Mapping[str, Any],
    folder_hints: list[str],
) -> ClassificationResult:
    tags = _as_str_list(metadata.get("tags"))
    return ClassificationResult(
        title=_as_text(metadata.get("title")) or FALLBACK_TITLE,
        description=_as_text(metadata.get("description")) or FALLBACK_DESCRIPTION,
        tags=tags if tags else list(FALLBACK_TAGS),
        suggested_folders=list(folder_hints) if folder_hints else [DEFAULT_CATEGORY],
        category=folder_hints[0] if folder_hints else DEFAULT_CATEGORY,
    )


def build_classification_prompt(
    *,
    content_type: str,
    url: str | None,
    metadata: Mapping[str, Any],
    folder_hints: list[str],
    image_base64: str | None,
) -> ClassificationPrompt:
    keywords = metadata.get("keywords")
    if isinstance(keywords, (list, tuple)):
        keywords = ", ".join(str(item) for item in keywords if item)

    lines = [
        f"Type: {content_type}" if content_type else None,
        f"URL: {url}" if url else None,
        f"Title: {metadata['title']}" if metadata.get("title") else None,
        f"Description: {metadata['description']}" if metadata.get("description") else None,
        f"Keywords: {keywords}" if keywords else None,
        f"Preferred folders: {', '.join(folder_hints)}" if folder_hints else None,
    ]
    user_text = "\n".join(line for line in lines if line)
    return ClassificationPrompt(
        system=SYSTEM_INSTRUCTION,
        user_text=user_text or EMPTY_PROMPT_TEXT,
        image_base64=image_base64 or None,
    )


def extract_json_object(raw: str | None) -> dict | None:
    """Parse the JSON object spanning the first ``{`` to the last ``}`` of ``raw``."""
    if not raw:
        return None
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end < start:
        return None
    try:
        payload = json.loads(raw[start : end + 1])
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    return payload


def parse_classification_reply(
    raw: str | None,
    *,
    fallback: ClassificationResult,
) -> ClassificationResult | None:
    payload = extract_json_object(raw)
    if payload is None:
        return None

    tags = _as_str_list(payload.get("tags"))
    folders = _as_str_list(payload.get("suggestedFolders"))
    return ClassificationResult(
        title=_as_text(payload.get("title")) or fallback.title,
        description=_as_text(payload.get("description")) or fallback.description,
        tags=tags if tags is not None else fallback.tags,
        suggested_folders=folders if folders is not None else fallback.suggested_folders,
        category=_as_text(payload.get("category")) or fallback.category,
    )


def _as_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _as_str_list(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]
