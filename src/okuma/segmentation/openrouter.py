"""OpenRouter chat-completion client used for card segmentation."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Any, Callable

from okuma.segmentation.config import GenerationSettings


logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


@dataclass(slots=True)
class GenerationRequestError(RuntimeError):
    """Domain error raised for failed text generation requests."""

    model: str
    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        return f"{self.message} (model={self.model})"


@dataclass(frozen=True, slots=True)
class Completion:
    text: str
    model: str
    total_tokens: int = 0


def _build_default_client(settings: GenerationSettings) -> Any:
    try:
        from openai import OpenAI
    except Exception as exc:  # pragma: no cover - environment-dependent
        raise GenerationRequestError(
            model=settings.model,
            message=f"OpenAI SDK unavailable for OpenRouter client: {exc}",
        ) from exc

    return OpenAI(api_key=settings.api_key, base_url=settings.base_url)


def _is_retryable(exc: Exception) -> bool:
    status_code = getattr(exc, "status_code", None)
    if status_code in _RETRYABLE_STATUS_CODES:
        return True

    if isinstance(exc, (TimeoutError, ConnectionError)):
        return True

    return type(exc).__name__ in {
        "RateLimitError",
        "APITimeoutError",
        "APIConnectionError",
        "InternalServerError",
    }


def _extract_text(response: Any, *, model: str) -> str:
    choices = getattr(response, "choices", None)
    if not isinstance(choices, list) or not choices:
        raise GenerationRequestError(model=model, message="Generation response missing choices")

    first = choices[0]
    message = getattr(first, "message", None)
    content = getattr(message, "content", None) if message is not None else None
    if content is None and isinstance(first, dict):
        message_dict = first.get("message", {})
        if isinstance(message_dict, dict):
            content = message_dict.get("content")

    if isinstance(content, list):
        content = "".join(str(part.get("text", "")) for part in content if isinstance(part, dict))

    text = str(content or "").strip()
    if not text:
        raise GenerationRequestError(model=model, message="Generation response returned empty text")
    return text


def _extract_total_tokens(response: Any) -> int:
    usage = getattr(response, "usage", None)
    if usage is None and isinstance(response, dict):
        usage = response.get("usage")
    if usage is None:
        return 0
    total = getattr(usage, "total_tokens", None)
    if total is None and isinstance(usage, dict):
        total = usage.get("total_tokens")
    try:
        return max(0, int(total or 0))
    except (TypeError, ValueError):
        return 0


class OpenRouterGenerator:
    """OpenRouter text generation wrapper with response validation.

    Retries are off unless ``max_retries`` is raised; only transient transport
    failures (429/5xx, timeouts) are ever retried.
    """

    def __init__(
        self,
        settings: GenerationSettings,
        *,
        client: Any | None = None,
        max_retries: int | None = None,
        retry_base_seconds: float = 0.25,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        retries = settings.max_retries if max_retries is None else max_retries
        if retries < 0:
            raise ValueError("max_retries cannot be negative")
        if retry_base_seconds < 0:
            raise ValueError("retry_base_seconds cannot be negative")

        self._settings = settings
        self._client = client or _build_default_client(settings)
        self._max_retries = retries
        self._retry_base_seconds = retry_base_seconds
        self._sleep = sleep

    @property
    def model(self) -> str:
        return self._settings.model

    def complete(self, *, system: str, user: str, json_mode: bool = False) -> Completion:
        system_text = system.strip()
        user_text = user.strip()
        if not system_text:
            raise ValueError("system instructions cannot be empty")
        if not user_text:
            raise ValueError("user content cannot be empty")

        request: dict[str, Any] = {
            "model": self._settings.model,
            "messages": [
                {"role": "system", "content": system_text},
                {"role": "user", "content": user_text},
            ],
            "temperature": self._settings.temperature,
            "max_tokens": self._settings.max_tokens,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        response = self._request_generation(request)
        text = _extract_text(response, model=self._settings.model)
        total_tokens = _extract_total_tokens(response)
        logger.info(
            "Generation completed (model=%s, chars=%d, tokens=%d)",
            self._settings.model,
            len(text),
            total_tokens,
        )
        return Completion(text=text, model=self._settings.model, total_tokens=total_tokens)

    def _request_generation(self, request: dict[str, Any]) -> Any:
        attempts = self._max_retries + 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                return self._client.chat.completions.create(**request)
            except Exception as exc:  # pragma: no cover - covered via tests with stubs
                last_error = exc
                should_retry = attempt < self._max_retries and _is_retryable(exc)
                if not should_retry:
                    break
                delay = self._retry_base_seconds * (2**attempt)
                logger.warning("Transient generation failure (attempt %d/%d): %s", attempt + 1, attempts, exc)
                self._sleep(delay)

        detail = str(last_error) if last_error is not None else "unknown OpenRouter error"
        raise GenerationRequestError(
            model=self._settings.model,
            message=f"Generation request failed after {attempts} attempt(s): {detail}",
            status_code=getattr(last_error, "status_code", None),
        ) from last_error
