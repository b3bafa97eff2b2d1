"""
Schema validation and repair for generated questions.

Strict mode rejects the whole batch on the first violation. Lenient mode
repairs what it can, records a FieldWarning per repair and always returns
fully conformant questions. Input objects are never mutated.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from app.schemas.quiz_schema import FieldWarning, QuizQuestion
from app.services.quiz.errors import SchemaValidationError

logger = logging.getLogger(__name__)

REQUIRED_OPTION_COUNT = 4
VALID_DIFFICULTIES = ("easy", "medium", "hard")
DEFAULT_DIFFICULTY = "medium"
DEFAULT_CATEGORY = "General"
DEFAULT_CORRECT_ANSWER = 0

# Leading integer of a string such as "2", "2.0" or "1 (B)".
_LEADING_INT = re.compile(r"^\s*([-+]?\d+)")


@dataclass(frozen=True)
class ValidationReport:
    questions: list[QuizQuestion]
    warnings: list[FieldWarning] = field(default_factory=list)


def _is_filled(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def placeholder_option(slot: int) -> str:
    return f"Option {slot} (placeholder)"


class _QuestionRepairer:
    """Validates one raw question; in lenient mode returns repaired field values."""

    def __init__(self, raw: Mapping[str, Any], index: int, strict_mode: bool) -> None:
        self.raw = raw
        self.index = index
        self.strict_mode = strict_mode
        self.warnings: list[FieldWarning] = []

    def _violation(self, field_name: str, message: str) -> None:
        if self.strict_mode:
            raise SchemaValidationError(self.index, field_name, message)
        logger.warning("Question at index %d: %s (%s); repairing", self.index, message, field_name)
        self.warnings.append(FieldWarning(index=self.index, field=field_name, message=message))

    def question(self) -> str:
        value = self.raw.get("question")
        if not _is_filled(value):
            raise SchemaValidationError(self.index, "question", "field is missing or empty")
        return value

    def options(self) -> list[str]:
        value = self.raw.get("options")
        if not isinstance(value, list):
            raise SchemaValidationError(self.index, "options", "field is missing or not an array")

        options = list(value)
        if len(options) != REQUIRED_OPTION_COUNT:
            self._violation("options", f"expected exactly {REQUIRED_OPTION_COUNT} options, got {len(options)}")
            options = options[:REQUIRED_OPTION_COUNT]
            while len(options) < REQUIRED_OPTION_COUNT:
                options.append(placeholder_option(len(options) + 1))

        repaired = []
        for slot, option in enumerate(options, start=1):
            if isinstance(option, str):
                repaired.append(option)
                continue
            self._violation("options", f"option {slot} is not a string: {option!r}")
            if option is None:
                repaired.append(placeholder_option(slot))
            else:
                repaired.append(json.dumps(option, ensure_ascii=False))
        return repaired

    def correct_answer(self) -> int:
        value = self.raw.get("correctAnswer")
        if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 3:
            return value
        if isinstance(value, float) and value.is_integer() and 0 <= value <= 3:
            return int(value)

        self._violation("correctAnswer", f"must be an integer between 0 and 3, got {value!r}")
        if isinstance(value, str):
            match = _LEADING_INT.match(value)
            parsed = int(match.group(1)) if match else None
            if parsed is not None and 0 <= parsed <= 3:
                logger.info("Converted string correctAnswer %r to %d", value, parsed)
                return parsed
        return DEFAULT_CORRECT_ANSWER

    def explanation(self, correct_answer: int) -> str:
        value = self.raw.get("explanation")
        if _is_filled(value):
            return value
        self._violation("explanation", "field is missing or empty")
        return f"The correct answer is option {correct_answer + 1}."

    def difficulty(self) -> str:
        value = self.raw.get("difficulty")
        if isinstance(value, str) and value.strip().lower() in VALID_DIFFICULTIES:
            return value.strip().lower()
        self._violation("difficulty", f"must be one of {', '.join(VALID_DIFFICULTIES)}, got {value!r}")
        return DEFAULT_DIFFICULTY

    def category(self) -> str:
        value = self.raw.get("category")
        if _is_filled(value):
            return value
        self._violation("category", "field is missing or empty")
        return DEFAULT_CATEGORY

    def build(self) -> QuizQuestion:
        # Field order matters: the explanation template uses the repaired answer.
        question = self.question()
        options = self.options()
        correct_answer = self.correct_answer()
        return QuizQuestion(
            question=question,
            options=options,
            correct_answer=correct_answer,
            explanation=self.explanation(correct_answer),
            difficulty=self.difficulty(),
            category=self.category(),
        )


def validate_question(raw: Any, index: int, strict_mode: bool = False) -> tuple[QuizQuestion, list[FieldWarning]]:
    if not isinstance(raw, Mapping):
        raise SchemaValidationError(index, "question", f"entry must be an object, got {type(raw).__name__}")
    repairer = _QuestionRepairer(raw, index, strict_mode)
    return repairer.build(), repairer.warnings


def validate_questions(candidates: Sequence[Any], strict_mode: bool = False) -> ValidationReport:
    logger.info("Validating %d questions (strict_mode=%s)", len(candidates), strict_mode)

    questions: list[QuizQuestion] = []
    warnings: list[FieldWarning] = []
    for index, raw in enumerate(candidates):
        question, question_warnings = validate_question(raw, index, strict_mode)
        questions.append(question)
        warnings.extend(question_warnings)

    logger.info("Validated %d questions with %d repairs", len(questions), len(warnings))
    return ValidationReport(questions=questions, warnings=warnings)
