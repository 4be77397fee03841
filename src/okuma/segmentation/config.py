"""Runtime configuration for the generative segmentation service."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping


DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_OPENROUTER_CHAT_MODEL = "openai/gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 4000
DEFAULT_MAX_RETRIES = 0


def _parse_int(*, name: str, raw_value: str, minimum: int) -> int:
    try:
        value = int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _parse_temperature(raw_value: str) -> float:
    try:
        value = float(raw_value)
    except ValueError as exc:
        raise ValueError("OKUMA_GENERATION_TEMPERATURE must be a number") from exc
    if not 0.0 <= value <= 2.0:
        raise ValueError("OKUMA_GENERATION_TEMPERATURE must be between 0 and 2")
    return value


@dataclass(frozen=True, slots=True)
class GenerationSettings:
    """Validated OpenRouter chat settings used for card segmentation."""

    api_key: str
    model: str = DEFAULT_OPENROUTER_CHAT_MODEL
    base_url: str = DEFAULT_OPENROUTER_BASE_URL
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    max_retries: int = DEFAULT_MAX_RETRIES

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GenerationSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        api_key = source.get("OPENROUTER_API_KEY", "").strip()
        if not api_key:
            raise ValueError("Missing required generation environment variable: OPENROUTER_API_KEY")

        model = source.get("OPENROUTER_CHAT_MODEL", DEFAULT_OPENROUTER_CHAT_MODEL).strip()
        if not model:
            raise ValueError("OPENROUTER_CHAT_MODEL cannot be empty")

        base_url = source.get("OPENROUTER_BASE_URL", DEFAULT_OPENROUTER_BASE_URL).strip()
        if not base_url:
            raise ValueError("OPENROUTER_BASE_URL cannot be empty")
        if not (base_url.startswith("http://") or base_url.startswith("https://")):
            raise ValueError("OPENROUTER_BASE_URL must start with http:// or https://")

        temperature = _parse_temperature(
            source.get("OKUMA_GENERATION_TEMPERATURE", str(DEFAULT_TEMPERATURE)).strip()
        )
        max_tokens = _parse_int(
            name="OKUMA_GENERATION_MAX_TOKENS",
            raw_value=source.get("OKUMA_GENERATION_MAX_TOKENS", str(DEFAULT_MAX_TOKENS)).strip(),
            minimum=1,
        )
        max_retries = _parse_int(
            name="OKUMA_GENERATION_MAX_RETRIES",
            raw_value=source.get("OKUMA_GENERATION_MAX_RETRIES", str(DEFAULT_MAX_RETRIES)).strip(),
            minimum=0,
        )

        return cls(
            api_key=api_key,
            model=model,
            base_url=base_url.rstrip("/"),
            temperature=temperature,
            max_tokens=max_tokens,
            max_retries=max_retries,
        )
