import asyncio
import json
from types import SimpleNamespace

import pytest

from app.schemas.quiz_schema import QuizQuestion
from app.services.quiz import persister
from app.services.quiz.conversation_log import (
    CONVERSATIONS_LOG,
    ERRORS_LOG,
    PROMPTS_LOG,
    ConversationLogger,
)
from app.services.quiz.errors import PersistenceError
from app.services.quiz.persister import save_generated_questions

QUESTION = QuizQuestion(
    question="Which keyword defines a coroutine?",
    options=["def", "async def", "yield", "lambda"],
    correct_answer=1,
    explanation="Coroutines are declared with async def.",
    difficulty="easy",
    category="Python",
)


def test_artifact_is_written_with_camel_case_keys(tmp_path):
    output_dir = tmp_path / "nested" / "out"
    path = asyncio.run(save_generated_questions([QUESTION], output_dir))

    assert path.parent == output_dir
    assert path.suffix == ".json"
    assert path.stem.isdigit()
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved == [
        {
            "question": "Which keyword defines a coroutine?",
            "options": ["def", "async def", "yield", "lambda"],
            "correctAnswer": 1,
            "explanation": "Coroutines are declared with async def.",
            "difficulty": "easy",
            "category": "Python",
        }
    ]


def test_batches_in_the_same_millisecond_get_distinct_files(tmp_path, monkeypatch):
    monkeypatch.setattr(persister, "time", SimpleNamespace(time=lambda: 1700000000.0))
    first = asyncio.run(save_generated_questions([QUESTION], tmp_path))
    second = asyncio.run(save_generated_questions([QUESTION, QUESTION], tmp_path))

    assert first.name == "1700000000000.json"
    assert second.name == "1700000000001.json"
    assert len(json.loads(first.read_text(encoding="utf-8"))) == 1
    assert len(json.loads(second.read_text(encoding="utf-8"))) == 2


def test_unwritable_output_dir(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(PersistenceError, match="Failed to save generated questions"):
        asyncio.run(save_generated_questions([QUESTION], blocker / "out"))


def test_prompt_goes_to_kind_file_and_conversation_file(tmp_path):
    log = ConversationLogger(tmp_path)
    asyncio.run(log.log_prompt("abc123", "Generate questions"))

    for filename in (PROMPTS_LOG, CONVERSATIONS_LOG):
        content = (tmp_path / filename).read_text(encoding="utf-8")
        assert "REQUEST ID: abc123 - PROMPT:\nGenerate questions\n\n" in content
        assert content.startswith("[")


def test_entries_are_appended(tmp_path):
    log = ConversationLogger(tmp_path)
    asyncio.run(log.log_error("r1", "first", kind="LOAD ERROR"))
    asyncio.run(log.log_error("r2", "second"))

    content = (tmp_path / ERRORS_LOG).read_text(encoding="utf-8")
    assert content.index("REQUEST ID: r1 - LOAD ERROR:") < content.index("REQUEST ID: r2 - ERROR:")


def test_structured_payloads_are_rendered_as_json(tmp_path):
    log = ConversationLogger(tmp_path)
    asyncio.run(log.log_outcome("r1", {"questions": 3}))
    content = (tmp_path / CONVERSATIONS_LOG).read_text(encoding="utf-8")
    assert 'SUCCESS:\n{\n  "questions": 3\n}' in content


def test_write_failure_is_swallowed(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    log = ConversationLogger(blocker / "logs")
    assert asyncio.run(log.write(PROMPTS_LOG, "label", "payload")) is False
    asyncio.run(log.log_prompt("r1", "still fine"))


def test_unencodable_payload_is_swallowed(tmp_path):
    log = ConversationLogger(tmp_path)
    assert asyncio.run(log.write(PROMPTS_LOG, "label", "bad \ud800 text")) is False
    asyncio.run(log.log_prompt("r1", "bad \ud800 text"))
    asyncio.run(log.log_prompt("r2", "good text"))
    assert "REQUEST ID: r2 - PROMPT:" in (tmp_path / PROMPTS_LOG).read_text(encoding="utf-8")
