"""Parse generator output into ordered reading cards.

Parsing is strict: a response that does not satisfy the selected contract
is an error, never an empty result or a best-effort split.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from okuma.errors import SegmentationContractError
from okuma.segmentation.models import Card, ResponseContract

logger = logging.getLogger(__name__)

CARD_MARKER_RE = re.compile(r"=== KART \d+ ===")
CARD_TITLE_PREFIX = "Kart"


def parse_delimited(raw: str, *, prior_card_count: int = 0) -> list[Card]:
    """Split on ``=== KART <N> ===`` markers and synthesize sequential titles."""

    if prior_card_count < 0:
        raise ValueError("prior_card_count cannot be negative")

    # The first element is whatever preceded the first marker.
    sections = CARD_MARKER_RE.split(raw)[1:]
    bodies = [section.strip() for section in sections]
    bodies = [body for body in bodies if body]

    if not bodies:
        raise SegmentationContractError(
            contract=ResponseContract.DELIMITED.value,
            message="no cards produced",
        )

    return [
        Card(title=f"{CARD_TITLE_PREFIX} {prior_card_count + index + 1}", content=body)
        for index, body in enumerate(bodies)
    ]


def _card_from_json(item: Any, *, index: int) -> Card:
    contract = ResponseContract.JSON.value
    if not isinstance(item, dict):
        raise SegmentationContractError(contract=contract, message=f"card #{index + 1} is not an object")

    title = item.get("title")
    content = item.get("content")
    if not isinstance(title, str) or not title.strip():
        raise SegmentationContractError(contract=contract, message=f"card #{index + 1} is missing 'title'")
    if not isinstance(content, str) or not content.strip():
        raise SegmentationContractError(contract=contract, message=f"card #{index + 1} is missing 'content'")

    return Card(title=title.strip(), content=content.strip())


def parse_json(raw: str) -> list[Card]:
    """Parse a strict ``{"cards": [...]}`` / ``{"error": ...}`` response."""

    contract = ResponseContract.JSON.value
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SegmentationContractError(contract=contract, message=f"malformed JSON response: {exc.msg}") from exc

    if not isinstance(payload, dict):
        raise SegmentationContractError(contract=contract, message="JSON response is not an object")

    error = payload.get("error")
    if error:
        raise SegmentationContractError(contract=contract, message=str(error))

    items = payload.get("cards")
    if items is not None and not isinstance(items, list):
        raise SegmentationContractError(contract=contract, message="'cards' is not a list")
    if not items:
        raise SegmentationContractError(contract=contract, message="no cards produced")

    return [_card_from_json(item, index=index) for index, item in enumerate(items)]


def parse_response(
    raw: str,
    contract: ResponseContract,
    *,
    prior_card_count: int = 0,
) -> list[Card]:
    """Parse *raw* under the caller-selected *contract*."""

    if contract is ResponseContract.JSON:
        cards = parse_json(raw)
    elif contract is ResponseContract.DELIMITED:
        cards = parse_delimited(raw, prior_card_count=prior_card_count)
    else:  # pragma: no cover - exhaustive over the enum
        raise ValueError(f"Unsupported response contract: {contract!r}")

    logger.info("Parsed %d card(s) from %s response", len(cards), contract.value)
    return cards
