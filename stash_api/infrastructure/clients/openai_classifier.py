from __future__ import annotations

from collections.abc import Callable
import logging
import time

from openai import OpenAI, OpenAIError

from stash_api.application.ports.classifier_port import ContentClassifierPort
from stash_api.domain.entities.classification import ClassificationPrompt
from stash_api.domain.exceptions import AssistantRunTimeoutError, ExternalServiceError


logger = logging.getLogger(__name__)


FAILED_RUN_STATUSES = {"failed", "cancelled", "expired", "requires_action", "incomplete"}


def build_user_content(prompt: ClassificationPrompt, *, include_image: bool = True) -> list[dict]:
    content: list[dict] = [{"type": "text", "text": prompt.user_text}]
    if include_image and prompt.image_base64:
        content.append(
            {
                "type": "image_url",
                "image_url": {"url": f"data:image/jpeg;base64,{prompt.image_base64}"},
            }
        )
    return content


class OpenAiChatClassifier(ContentClassifierPort):
    """Single-turn chat completion constrained to a JSON object reply."""

    def __init__(self, *, client: OpenAI, model: str, temperature: float = 0.4):
        self._client = client
        self._model = model
        self._temperature = temperature

    def classify(self, *, prompt: ClassificationPrompt) -> str:
        messages = [
            {"role": "system", "content": prompt.system},
            {"role": "user", "content": build_user_content(prompt)},
        ]
        try:
            completion = self._client.chat.completions.create(
                model=self._model,
                temperature=self._temperature,
                response_format={"type": "json_object"},
                messages=messages,
            )
        except OpenAIError as exc:
            raise ExternalServiceError("OpenAI chat completion failed.") from exc

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""


class OpenAiAssistantClassifier(ContentClassifierPort):
    """Runs the prompt on a fresh assistant thread and polls the run until it settles.

    Polling happens every ``poll_interval_seconds`` for at most ``max_polls``
    retrievals; a run still pending after that raises AssistantRunTimeoutError.
    Runs ending in a failed state raise ExternalServiceError. Images are not
    forwarded on this path.
    """

    def __init__(
        self,
        *,
        client: OpenAI,
        assistant_id: str,
        poll_interval_seconds: float,
        max_polls: int,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._client = client
        self._assistant_id = assistant_id
        self._poll_interval_seconds = poll_interval_seconds
        self._max_polls = max(1, max_polls)
        self._sleep = sleep

    def classify(self, *, prompt: ClassificationPrompt) -> str:
        threads = self._client.beta.threads
        try:
            thread = threads.create()
            threads.messages.create(
                thread_id=thread.id,
                role="user",
                content=build_user_content(prompt, include_image=False),
            )
            run = threads.runs.create(
                thread_id=thread.id,
                assistant_id=self._assistant_id,
                additional_instructions=prompt.system,
            )
            self._wait_for_run(thread_id=thread.id, run=run)
            messages = threads.messages.list(thread_id=thread.id, order="desc", limit=10)
        except OpenAIError as exc:
            raise ExternalServiceError("OpenAI assistant run failed.") from exc

        return _latest_assistant_text(messages.data)

    def _wait_for_run(self, *, thread_id: str, run):
        polls = 0
        while True:
            status = run.status
            if status == "completed":
                return run
            if status in FAILED_RUN_STATUSES:
                logger.warning(
                    "openai_assistant: run_failed thread_id=%s run_id=%s status=%s",
                    thread_id,
                    run.id,
                    status,
                )
                raise ExternalServiceError(f"Assistant run ended with status '{status}'.")
            if polls >= self._max_polls:
                logger.warning(
                    "openai_assistant: run_timeout thread_id=%s run_id=%s status=%s polls=%s",
                    thread_id,
                    run.id,
                    status,
                    polls,
                )
                raise AssistantRunTimeoutError(
                    f"Assistant run did not finish after {polls} polls (last status '{status}')."
                )

            self._sleep(self._poll_interval_seconds)
            run = self._client.beta.threads.runs.retrieve(thread_id=thread_id, run_id=run.id)
            polls += 1


def _latest_assistant_text(messages) -> str:
    for message in messages:
        if getattr(message, "role", None) != "assistant":
            continue
        parts = []
        for block in getattr(message, "content", None) or []:
            if getattr(block, "type", None) == "text":
                parts.append(block.text.value)
        if parts:
            return "\n".join(parts)
    return ""
