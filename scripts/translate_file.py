"""Utility script to translate a single HTML file."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from src.domtranslate.config import get_settings
from src.domtranslate.dom.collector import document_root, parse_html
from src.domtranslate.translator import DOMTranslator


async def translate_file(source: Path, output: Path, source_language: str, target_language: str) -> None:
    settings = get_settings()
    translator = DOMTranslator.from_settings(settings)
    soup = parse_html(source.read_text(encoding="utf-8"))
    outcome = await translator.translate_document(document_root(soup), source_language, target_language)
    output.write_text(str(soup), encoding="utf-8")
    stats = outcome.stats
    print(
        f"Translated {stats.segments} segments in {stats.batches} batches "
        f"({stats.rewritten} nodes rewritten, {stats.skipped} skipped) -> {output}"
    )


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Translate the visible text of an HTML file")
    parser.add_argument("--input", required=True, type=Path, help="HTML file to translate")
    parser.add_argument("--output", required=True, type=Path, help="Where to write the translated HTML")
    parser.add_argument("--source", required=True, help="Source language code, e.g. en")
    parser.add_argument("--target", required=True, help="Target language code, e.g. hi")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    level = getattr(logging, get_settings().log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if args.input.resolve() == args.output.resolve():
        raise SystemExit("Refusing to overwrite the input file; choose a different --output.")
    asyncio.run(translate_file(args.input, args.output, args.source, args.target))


if __name__ == "__main__":
    main()
