import json

from app.schemas.quiz_schema import GenerationOptions, QuestionFormat
from app.services.quiz.prompt_builder import (
    DEFAULT_DIFFICULTY_TEXT,
    DEFAULT_PROMPT_TEMPLATE,
    DEFAULT_TOPIC_TEXT,
    construct_prompt,
    format_existing_questions,
)

QUESTION_FORMAT = QuestionFormat.model_validate(
    {
        "schema": {"type": "array", "items": {"type": "object"}},
        "example": [{"question": "Café?", "options": ["a", "b", "c", "d"]}],
    }
)


def test_all_placeholders_are_filled():
    options = GenerationOptions(
        topic="Concurrency",
        language="Python",
        difficulty_text="deep understanding of scalable systems",
        position_instruction="targeted at a senior developer",
    )
    prompt = construct_prompt(QUESTION_FORMAT, ["What is the GIL?"], options)

    assert 'the topic of "Concurrency"' in prompt
    assert 'Focus on the "Python" programming language. targeted at a senior developer. ' in prompt
    assert "demonstrate deep understanding of scalable systems." in prompt
    assert "- What is the GIL?" in prompt
    assert json.dumps(QUESTION_FORMAT.schema_) in prompt
    assert "Café?" in prompt
    for placeholder in ("{topic}", "{language}", "{difficultyText}", "{positionInstruction}", "{schema}"):
        assert placeholder not in prompt


def test_missing_options_use_fallback_wording():
    prompt = construct_prompt(QUESTION_FORMAT, [])
    assert f"developers on {DEFAULT_TOPIC_TEXT}." in prompt
    assert f"\nThe questions should demonstrate {DEFAULT_DIFFICULTY_TEXT}." in prompt
    assert "programming language" not in prompt


def test_custom_template_replaces_every_occurrence():
    template = "{topic} / {topic} / {existingQuestions}"
    prompt = construct_prompt(QUESTION_FORMAT, ["A", "B"], GenerationOptions(topic="Git"), template=template)
    assert prompt == 'the topic of "Git" / the topic of "Git" / - A\n- B'


def test_placeholder_text_inside_values_is_not_expanded():
    prompt = construct_prompt(QUESTION_FORMAT, ["Explain {language} scoping"], template="{existingQuestions}")
    assert prompt == "- Explain {language} scoping"


def test_unknown_placeholders_are_left_verbatim():
    assert construct_prompt(QUESTION_FORMAT, [], template="{unknown} {topic}") == (
        "{unknown} " + DEFAULT_TOPIC_TEXT
    )


def test_default_template_mentions_every_placeholder():
    for placeholder in (
        "{topic}",
        "{language}",
        "{positionInstruction}",
        "{difficultyText}",
        "{schema}",
        "{existingQuestions}",
        "{example}",
    ):
        assert placeholder in DEFAULT_PROMPT_TEMPLATE


def test_format_existing_questions():
    assert format_existing_questions([]) == ""
    assert format_existing_questions(["Q1", "Q2"]) == "- Q1\n- Q2"
