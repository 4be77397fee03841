"""Shared data structures for card segmentation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


DEFAULT_VARIANT = "default"
STRUCTURED_VARIANT = "structured"
BUILTIN_VARIANTS = frozenset({DEFAULT_VARIANT, STRUCTURED_VARIANT})


class ResponseContract(Enum):
    """Output format the generator is instructed to produce."""

    JSON = "json"
    DELIMITED = "delimited"


@dataclass(slots=True)
class Card:
    title: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "content": self.content}


@dataclass(frozen=True, slots=True)
class PromptOptions:
    """Caller choices for building segmentation instructions.

    ``prompt_variant`` is ``default``, ``structured`` or any other text, which
    is then used verbatim as the system instructions.
    """

    prompt_variant: str = DEFAULT_VARIANT
    page_range_hint: str | None = None
    contract: ResponseContract = ResponseContract.DELIMITED
    extra_instructions: str | None = None

    @property
    def is_custom(self) -> bool:
        return self.prompt_variant not in BUILTIN_VARIANTS


@dataclass(frozen=True, slots=True)
class SegmentationRequest:
    system_instructions: str
    user_payload: str
    contract: ResponseContract
