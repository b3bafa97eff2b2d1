"""
Recognized outer containers ("envelopes") around a generated question array.

Each envelope is a matcher returning the nested list or None. Matchers are
tried in declaration order; adding a shape means adding one entry to ENVELOPES.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from app.services.quiz.errors import ContentExtractionError

logger = logging.getLogger(__name__)


class EnvelopeShape(str, Enum):
    BARE_ARRAY = "bare-array"
    QUESTIONS_PROPERTY = "questions-property"
    SINGLE_QUESTION = "single-question"
    ITEMS_PROPERTY = "items-property"
    SCHEMA_DEFINITION = "schema-definition"


@dataclass(frozen=True)
class EnvelopeMatch:
    shape: EnvelopeShape
    questions: list


Matcher = Callable[[Any, bool], Optional[list]]


def looks_like_question(value: Any) -> bool:
    return isinstance(value, dict) and bool(value.get("question"))


def _is_question_list(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0 and looks_like_question(value[0])


def _bare_array(content: Any, strict_mode: bool) -> Optional[list]:
    return content if isinstance(content, list) else None


def _questions_property(content: Any, strict_mode: bool) -> Optional[list]:
    if isinstance(content, dict) and isinstance(content.get("questions"), list):
        return content["questions"]
    return None


def _single_question(content: Any, strict_mode: bool) -> Optional[list]:
    if not strict_mode and looks_like_question(content):
        return [content]
    return None


def _items_property(content: Any, strict_mode: bool) -> Optional[list]:
    if isinstance(content, dict) and _is_question_list(content.get("items")):
        return content["items"]
    return None


def _schema_definition(content: Any, strict_mode: bool) -> Optional[list]:
    if not (
        isinstance(content, dict)
        and content.get("type") == "array"
        and isinstance(content.get("items"), (dict, list))
    ):
        return None

    # Best-effort: the model sometimes echoes the schema and puts the real
    # questions under an arbitrary key next to it.
    logger.warning("Model output looks like a schema definition; searching it for questions")
    for key, value in content.items():
        if key in ("type", "items"):
            continue
        if _is_question_list(value):
            logger.warning("Using questions found in schema property %r", key)
            return value

    if _is_question_list(content["items"]):
        logger.warning("Using the schema 'items' array as questions")
        return content["items"]
    return None


ENVELOPES: tuple[tuple[EnvelopeShape, Matcher], ...] = (
    (EnvelopeShape.BARE_ARRAY, _bare_array),
    (EnvelopeShape.QUESTIONS_PROPERTY, _questions_property),
    (EnvelopeShape.SINGLE_QUESTION, _single_question),
    (EnvelopeShape.ITEMS_PROPERTY, _items_property),
    (EnvelopeShape.SCHEMA_DEFINITION, _schema_definition),
)


def match_envelope(content: Any, strict_mode: bool = False) -> EnvelopeMatch:
    for shape, matcher in ENVELOPES:
        questions = matcher(content, strict_mode)
        if questions is not None:
            if shape is not EnvelopeShape.BARE_ARRAY:
                logger.info("Unwrapped questions from %s envelope", shape.value)
            return EnvelopeMatch(shape=shape, questions=questions)

    raise ContentExtractionError(
        f"Generated content is not an array or valid questions object (got {type(content).__name__})"
    )
