"""Pipeline orchestration for reading-card generation."""

from .orchestrator import CardGenerationResult, CardPipeline, CardSource

__all__ = ["CardGenerationResult", "CardPipeline", "CardSource"]
