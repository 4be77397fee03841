"""Card segmentation contract: prompt building and response parsing."""

from .models import Card, PromptOptions, ResponseContract, SegmentationRequest
from .parser import parse_response
from .prompts import build_request
from .transform import TRANSFORM_INSTRUCTIONS, transform_text

__all__ = [
    "Card",
    "PromptOptions",
    "ResponseContract",
    "SegmentationRequest",
    "TRANSFORM_INSTRUCTIONS",
    "build_request",
    "parse_response",
    "transform_text",
]
