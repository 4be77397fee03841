"""CLI command extracting OCR text from a PDF page range."""

from __future__ import annotations

import argparse
import json
import logging

from dotenv import load_dotenv

from okuma.cli.progress import StderrProgress
from okuma.errors import CardPipelineError
from okuma.extraction.config import ExtractionSettings
from okuma.extraction.extractor import PdfTextExtractor


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Extract text from a PDF with page rendering and OCR")
    parser.add_argument("--source", required=True, help="PDF URL or local path")
    parser.add_argument("--pages", default="all", help="Page range: 'all' or 0-indexed 'A-B'")
    parser.add_argument("--lang", default=None, help="Tesseract language code (default from settings)")
    parser.add_argument("--quiet", action="store_true", help="Do not print progress to stderr")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(message)s")

    try:
        extractor = PdfTextExtractor(ExtractionSettings.from_env())
    except ValueError as exc:
        print(json.dumps({"source": args.source, "error": str(exc), "kind": "configuration"}, ensure_ascii=False, indent=2))
        return 1
    progress = None if args.quiet else StderrProgress()

    try:
        text = extractor.extract(args.source, args.pages, progress, language=args.lang)
    except CardPipelineError as exc:
        print(json.dumps({"source": args.source, "error": str(exc), "kind": exc.kind}, ensure_ascii=False, indent=2))
        return 1

    payload = {
        "source": args.source,
        "pages": args.pages,
        "characters": len(text),
        "text": text,
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
