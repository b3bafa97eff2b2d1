"""
Run the quiz generation pipeline once from the command line.

Writes the validated batch to the configured output directory and prints the
artifact path. Gemini credentials come from the environment / .env file.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import replace
from pathlib import Path
from typing import Iterable

from dotenv import load_dotenv

from app.core.config import get_settings
from app.core.positions import VALID_POSITIONS, get_position_metadata
from app.schemas.quiz_schema import GenerationOptions
from app.services.quiz.errors import QuizGenerationError
from app.services.quiz_generator_service import create_quiz_service


def build_options(args: argparse.Namespace) -> GenerationOptions:
    settings = get_settings()
    position = get_position_metadata(args.position)
    return GenerationOptions(
        topic=args.topic,
        language=args.language,
        position=position.slug,
        difficulty_text=position.difficulty_text,
        position_instruction=position.position_instruction,
        position_level=position.level,
        temperature=args.temperature if args.temperature is not None else settings.quiz_temperature,
        max_output_tokens=settings.quiz_max_output_tokens,
        model=args.model,
    )


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate multiple-choice interview questions with Gemini.")
    parser.add_argument("--topic", required=True, help="Technical topic (e.g., 'Concurrency')")
    parser.add_argument("--language", required=True, help="Programming language (e.g., 'Python')")
    parser.add_argument("--position", required=True, choices=VALID_POSITIONS, type=str.lower, help="Candidate level")
    parser.add_argument("--existing-questions", type=Path, default=None, help="Text file with one known question per line")
    parser.add_argument("--output-dir", type=Path, default=None, help="Override the artifact directory")
    parser.add_argument("--model", type=str, default=None, help="Gemini model name override")
    parser.add_argument("--temperature", type=float, default=None, help="Sampling temperature override")
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail on any schema violation instead of repairing (default: QUIZ_STRICT_MODE)",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    service = create_quiz_service(get_settings())
    if args.output_dir:
        service.config = replace(service.config, output_dir=args.output_dir)

    try:
        result = asyncio.run(
            service.generate(
                build_options(args),
                existing_questions_path=args.existing_questions,
                strict_mode=args.strict,
            )
        )
    except QuizGenerationError as exc:
        print(f"Generation failed: {exc}")
        return 1

    print(f"Saved {len(result.questions)} questions to {result.artifact_path} (repairs: {len(result.warnings)})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
