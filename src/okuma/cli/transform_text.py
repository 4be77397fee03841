"""CLI command running a quota-gated free-form text transformation."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from okuma.errors import CardPipelineError
from okuma.segmentation.config import GenerationSettings
from okuma.segmentation.openrouter import GenerationRequestError, OpenRouterGenerator
from okuma.service.reading_cards import TextTransformService
from okuma.storage.token_usage import DEFAULT_DAILY_TOKEN_LIMIT, TokenUsageRepository


def _fail(error: str, kind: str) -> int:
    print(json.dumps({"success": False, "error": error, "kind": kind}, ensure_ascii=False, indent=2))
    return 1


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Transform text into a card title, card content or flashcard")
    parser.add_argument("--db-path", default=".okuma.db", help="SQLite database path")
    parser.add_argument("--user-id", required=True, help="User requesting the transformation")
    parser.add_argument("--prompt", default=None, help="Transformation request including the source text")
    parser.add_argument("--prompt-file", default=None, help="UTF-8 file holding the transformation request")
    parser.add_argument("--daily-limit", type=int, default=DEFAULT_DAILY_TOKEN_LIMIT, help="Daily token limit")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(message)s")

    try:
        prompt = Path(args.prompt_file).read_text(encoding="utf-8") if args.prompt_file else args.prompt or ""
    except OSError as exc:
        return _fail(f"could not read prompt file: {exc}", "invalid_input")

    try:
        generator = OpenRouterGenerator(GenerationSettings.from_env())
    except ValueError as exc:
        return _fail(str(exc), "configuration")

    with TokenUsageRepository(args.db_path, daily_limit=args.daily_limit) as quota:
        service = TextTransformService(generator=generator, quota=quota)
        try:
            completion = service.transform(user_id=args.user_id, prompt=prompt)
        except ValueError as exc:
            return _fail(str(exc), "invalid_input")
        except CardPipelineError as exc:
            return _fail(str(exc), exc.kind)
        except GenerationRequestError as exc:
            return _fail(str(exc), "generation")

    payload = {
        "success": True,
        "transformed_text": completion.text,
        "model": completion.model,
        "tokens_used": completion.total_tokens,
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
