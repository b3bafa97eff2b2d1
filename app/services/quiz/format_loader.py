"""
Loads the question format document and the list of questions already known.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from app.schemas.quiz_schema import QuestionFormat
from app.services.quiz.errors import ContextLoadError, FormatLoadError

logger = logging.getLogger(__name__)


def _read_question_format(path: Path) -> QuestionFormat:
    with path.open(encoding="utf-8") as fp:
        data = json.load(fp)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return QuestionFormat.model_validate(data)


async def load_question_format(path: str | Path) -> QuestionFormat:
    format_path = Path(path)
    try:
        question_format = await asyncio.to_thread(_read_question_format, format_path)
    except FileNotFoundError as exc:
        raise FormatLoadError(f"Failed to load question format: file not found: {format_path}") from exc
    except json.JSONDecodeError as exc:
        raise FormatLoadError(f"Failed to load question format: invalid JSON in {format_path}: {exc}") from exc
    except (OSError, UnicodeDecodeError, ValueError, ValidationError) as exc:
        raise FormatLoadError(f"Failed to load question format: {exc}") from exc

    logger.info("Loaded question format from %s", format_path)
    return question_format


def _read_lines(path: Path) -> list[str]:
    text = path.read_text(encoding="utf-8")
    return [line.rstrip("\r") for line in text.split("\n") if line.strip()]


async def load_existing_questions(path: str | Path | None) -> list[str]:
    """
    Read known questions, one per line, to keep the model from repeating them.

    A missing file means there is nothing to avoid yet and yields an empty list.
    """
    if path is None:
        return []

    questions_path = Path(path)
    try:
        return await asyncio.to_thread(_read_lines, questions_path)
    except FileNotFoundError:
        logger.info("Existing questions file %s not found; continuing without dedup context", questions_path)
        return []
    except (OSError, UnicodeDecodeError) as exc:
        raise ContextLoadError(f"Failed to load existing questions: {exc}") from exc
