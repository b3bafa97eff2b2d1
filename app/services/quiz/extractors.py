"""
Recovers a JSON question array from free-text model output.

The model is asked for a bare JSON array but routinely wraps it in prose,
markdown fences or an object envelope. Cleaning steps and parse strategies
are plain functions tried cheapest-first; the first one that yields a value
wins, and the value is then unwrapped by the envelope matcher.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Optional, Sequence

from app.services.quiz.envelopes import match_envelope
from app.services.quiz.errors import ContentExtractionError

logger = logging.getLogger(__name__)

FENCE = "```"
LANGUAGE_HINTS = ("json", "javascript", "js")

_HINTED_BLOCK = re.compile(r"```(?:json|javascript|js)\s*([\s\S]*?)\s*```", re.IGNORECASE)
_ANY_BLOCK = re.compile(r"```\s*([\s\S]*?)\s*```")


# ─── Fence stripping ─────────────────────────────────────────────────────────


def _hinted_block(text: str) -> Optional[str]:
    match = _HINTED_BLOCK.search(text)
    if match and match.group(1):
        return match.group(1).strip()
    return None


def _any_block(text: str) -> Optional[str]:
    match = _ANY_BLOCK.search(text)
    if match and match.group(1):
        return match.group(1).strip()
    return None


def _middle_segment(text: str) -> Optional[str]:
    parts = text.split(FENCE)
    if len(parts) < 3:
        return None
    lines = parts[1].strip().split("\n")
    if lines and lines[0].strip() in LANGUAGE_HINTS:
        lines = lines[1:]
    return "\n".join(lines).strip()


FENCE_STRATEGIES: tuple[Callable[[str], Optional[str]], ...] = (_hinted_block, _any_block, _middle_segment)


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced block, or the text unchanged."""
    if FENCE not in text:
        return text

    for strategy in FENCE_STRATEGIES:
        extracted = strategy(text)
        if extracted is not None:
            logger.info("Extracted fenced content using %s", strategy.__name__.lstrip("_"))
            return extracted

    logger.warning("Response contains a code fence but no block could be extracted")
    return text


# ─── Array slicing / bracket matching ────────────────────────────────────────


def slice_array_bounds(text: str, keep_objects: bool = True) -> str:
    """
    Cut surrounding prose off an array: first '[' through last ']'.

    With keep_objects, a text that is already a whole object is left for the
    envelope matcher; slicing it would keep only its first nested array.
    """
    if text.startswith("[") or "[" not in text or "]" not in text:
        return text
    if keep_objects and text.startswith("{") and text.endswith("}"):
        return text
    start = text.index("[")
    end = text.rindex("]") + 1
    if start < end:
        return text[start:end]
    return text


def find_json_by_bracket_matching(text: str) -> Optional[str]:
    """
    Return the first balanced top-level [...] or {...} span in text.

    Brackets inside double-quoted strings are ignored; a backslash escapes the
    character after it.
    """
    depth = 0
    in_quotes = False
    escape_next = False
    start = -1

    for pos, char in enumerate(text):
        if escape_next:
            escape_next = False
            continue
        if char == "\\":
            escape_next = True
            continue
        if char == '"':
            in_quotes = not in_quotes
            continue
        if in_quotes:
            continue

        if char in "[{":
            if depth == 0:
                start = pos
            depth += 1
        elif char in "]}" and depth > 0:
            depth -= 1
            if depth == 0:
                return text[start : pos + 1]

    return None


# ─── Parsing ─────────────────────────────────────────────────────────────────


def _parse_cleaned(text: str) -> Any:
    return json.loads(slice_array_bounds(strip_code_fences(text)))


def _parse_bracket_matched(text: str) -> Any:
    candidate = find_json_by_bracket_matching(text)
    if candidate is None:
        raise ValueError("no balanced JSON span found")
    logger.info("Found potential JSON by bracket matching: %s", candidate[:100])
    return json.loads(candidate)


def _parse_inner_array(text: str) -> Any:
    # Last resort for a broken object wrapper such as {questions: [...]}.
    candidate = slice_array_bounds(strip_code_fences(text), keep_objects=False)
    if not candidate.startswith("["):
        raise ValueError("no array span found")
    logger.info("Recovered inner array from malformed wrapper")
    return json.loads(candidate)


ParseStrategy = Callable[[str], Any]

PARSE_STRATEGIES: tuple[ParseStrategy, ...] = (_parse_cleaned, _parse_bracket_matched, _parse_inner_array)


def _first_successful_parse(text: str, strategies: Sequence[ParseStrategy]) -> Any:
    errors: list[ValueError] = []
    for strategy in strategies:
        try:
            value = strategy(text)
        except ValueError as exc:
            logger.warning("JSON parse attempt %s failed: %s", strategy.__name__.lstrip("_"), exc)
            errors.append(exc)
            continue
        return value

    # The first error describes the primary attempt and is the most useful.
    first_error = errors[0] if errors else ValueError("no parse strategy configured")
    raise ContentExtractionError(f"Invalid generated content: {first_error}") from first_error


def extract_questions_array(raw_text: Any, strict_mode: bool = False) -> list:
    """
    Recover the question list from raw model output.

    Raises ContentExtractionError when no strategy yields a parseable value or
    the parsed value is not a recognized envelope.
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise ContentExtractionError("Content is empty or not a string")

    original = raw_text.strip()
    logger.info("Extracting questions from content (first 200 chars): %s", original[:200])

    parsed = _first_successful_parse(original, PARSE_STRATEGIES)
    return match_envelope(parsed, strict_mode).questions
