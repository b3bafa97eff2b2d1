import asyncio
import json

import pytest

from app.core.config import DEFAULT_QUESTION_FORMAT_PATH
from app.services.quiz.errors import ContextLoadError, FormatLoadError
from app.services.quiz.format_loader import load_existing_questions, load_question_format


def test_bundled_question_format_loads():
    question_format = asyncio.run(load_question_format(DEFAULT_QUESTION_FORMAT_PATH))
    assert question_format.schema_["type"] == "array"
    assert question_format.example[0]["correctAnswer"] in range(4)


def test_question_format_from_file(tmp_path):
    path = tmp_path / "format.json"
    path.write_text(json.dumps({"schema": {"type": "array"}, "example": [], "format": "json"}), encoding="utf-8")
    question_format = asyncio.run(load_question_format(path))
    assert question_format.schema_ == {"type": "array"}
    assert question_format.example == []


def test_missing_question_format(tmp_path):
    with pytest.raises(FormatLoadError, match="Failed to load question format: file not found"):
        asyncio.run(load_question_format(tmp_path / "missing.json"))


def test_invalid_question_format_json(tmp_path):
    path = tmp_path / "format.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(FormatLoadError, match="invalid JSON"):
        asyncio.run(load_question_format(path))


def test_question_format_must_be_an_object(tmp_path):
    path = tmp_path / "format.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(FormatLoadError, match="expected a JSON object"):
        asyncio.run(load_question_format(path))


def test_existing_questions_skip_blank_lines(tmp_path):
    path = tmp_path / "existing.txt"
    path.write_text("What is a mutex?\r\n\r\n   \nWhat is a semaphore?\n", encoding="utf-8")
    assert asyncio.run(load_existing_questions(path)) == ["What is a mutex?", "What is a semaphore?"]


def test_existing_questions_empty_file(tmp_path):
    path = tmp_path / "existing.txt"
    path.write_text("", encoding="utf-8")
    assert asyncio.run(load_existing_questions(path)) == []


def test_existing_questions_missing_or_unset(tmp_path):
    assert asyncio.run(load_existing_questions(None)) == []
    assert asyncio.run(load_existing_questions(tmp_path / "nope.txt")) == []


def test_existing_questions_unreadable(tmp_path):
    # A directory exists but cannot be read as text.
    with pytest.raises(ContextLoadError, match="Failed to load existing questions"):
        asyncio.run(load_existing_questions(tmp_path))
