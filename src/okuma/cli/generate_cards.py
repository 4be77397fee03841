"""CLI command generating and storing reading cards for a document."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from okuma.cli.progress import StderrProgress
from okuma.errors import CardPipelineError
from okuma.extraction.config import ExtractionSettings
from okuma.extraction.extractor import PdfTextExtractor
from okuma.pipeline.orchestrator import CardPipeline, CardSource
from okuma.segmentation.config import GenerationSettings
from okuma.segmentation.models import PromptOptions, ResponseContract
from okuma.segmentation.openrouter import GenerationRequestError, OpenRouterGenerator
from okuma.service.reading_cards import ReadingCardService
from okuma.storage.card_repository import CardRepository
from okuma.storage.token_usage import DEFAULT_DAILY_TOKEN_LIMIT, TokenUsageRepository


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate reading cards for a document with AI segmentation")
    parser.add_argument("--db-path", default=".okuma.db", help="SQLite database path")
    parser.add_argument("--document-id", required=True, help="Document identifier cards are attached to")
    parser.add_argument("--user-id", required=True, help="User requesting the cards")
    parser.add_argument("--text-file", default=None, help="UTF-8 text file with the document content")
    parser.add_argument("--source", default=None, help="PDF URL or local path used when no text is usable")
    parser.add_argument("--pages", default="all", help="Page range: 'all' or 0-indexed 'A-B'")
    parser.add_argument(
        "--prompt",
        default="default",
        help="Prompt variant: 'default', 'structured' or custom instruction text",
    )
    parser.add_argument(
        "--contract",
        choices=[contract.value for contract in ResponseContract],
        default=ResponseContract.DELIMITED.value,
        help="Response contract expected from the generator",
    )
    parser.add_argument("--instructions", default=None, help="Additional instructions for built-in prompts")
    parser.add_argument("--page-hint", default=None, help="Advisory page window forwarded to the generator")
    parser.add_argument("--daily-limit", type=int, default=DEFAULT_DAILY_TOKEN_LIMIT, help="Daily token limit")
    parser.add_argument("--quiet", action="store_true", help="Do not print progress to stderr")
    return parser


def _fail(error: str, kind: str) -> int:
    print(json.dumps({"success": False, "error": error, "kind": kind}, ensure_ascii=False, indent=2))
    return 1


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = _build_parser().parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    try:
        text = Path(args.text_file).read_text(encoding="utf-8") if args.text_file else None
    except OSError as exc:
        return _fail(f"could not read text file: {exc}", "invalid_input")

    source = CardSource(text=text, pdf_url=args.source)
    options = PromptOptions(
        prompt_variant=args.prompt,
        page_range_hint=args.page_hint,
        contract=ResponseContract(args.contract),
        extra_instructions=args.instructions,
    )

    try:
        pipeline = CardPipeline(
            extractor=PdfTextExtractor(ExtractionSettings.from_env()),
            generator=OpenRouterGenerator(GenerationSettings.from_env()),
        )
    except ValueError as exc:
        return _fail(str(exc), "configuration")

    with CardRepository(args.db_path) as store, TokenUsageRepository(
        args.db_path, daily_limit=args.daily_limit
    ) as quota:
        service = ReadingCardService(pipeline=pipeline, store=store, quota=quota)
        try:
            result = service.generate_for_document(
                document_id=args.document_id,
                user_id=args.user_id,
                source=source,
                page_range=args.pages,
                options=options,
                progress=None if args.quiet else StderrProgress(),
            )
        except CardPipelineError as exc:
            return _fail(str(exc), exc.kind)
        except GenerationRequestError as exc:
            return _fail(str(exc), "generation")

    payload = {"success": True, **result.to_dict()}
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
