import json
import re
from typing import Optional, Sequence

from app.schemas.quiz_schema import GenerationOptions, QuestionFormat

DEFAULT_PROMPT_TEMPLATE = """
Generate 10 unique multiple-choice technical interview questions for software developers on {topic}.
{language}{positionInstruction}The questions should demonstrate {difficultyText}.

Return ONLY a JSON array that follows this schema. Do not add prose, comments or code fences.
Schema:
{schema}

Each question must have exactly 4 options, a zero-based "correctAnswer" between 0 and 3,
a short "explanation", a "difficulty" of easy, medium or hard, and a "category".

Do NOT repeat or paraphrase any of these existing questions:
{existingQuestions}

Example output:
{example}
"""

DEFAULT_TOPIC_TEXT = "various software development topics"
DEFAULT_DIFFICULTY_TEXT = "various difficulty levels"


def format_existing_questions(existing_questions: Sequence[str]) -> str:
    return "\n".join(f"- {question}" for question in existing_questions)


def construct_prompt(
    question_format: QuestionFormat,
    existing_questions: Sequence[str],
    options: Optional[GenerationOptions] = None,
    template: Optional[str] = None,
) -> str:
    """
    Render the generation prompt from a template with named placeholders.

    Missing language/position wording renders as an empty string so the
    sentence stays grammatical; a missing topic falls back to a generic phrase.
    """
    options = options or GenerationOptions()

    topic_text = f'the topic of "{options.topic}"' if options.topic else DEFAULT_TOPIC_TEXT
    language_text = f'Focus on the "{options.language}" programming language. ' if options.language else ""
    difficulty_text = options.difficulty_text or DEFAULT_DIFFICULTY_TEXT
    position_text = f"{options.position_instruction}. " if options.position_instruction else ""

    replacements = {
        "{topic}": topic_text,
        "{language}": language_text,
        "{difficultyText}": difficulty_text,
        "{positionInstruction}": position_text,
        "{schema}": json.dumps(question_format.schema_, ensure_ascii=False),
        "{existingQuestions}": format_existing_questions(existing_questions),
        "{example}": json.dumps(question_format.example, indent=2, ensure_ascii=False),
    }

    # Single pass: placeholder-like text inside substituted values is left alone.
    pattern = re.compile("|".join(re.escape(placeholder) for placeholder in replacements))
    return pattern.sub(lambda match: replacements[match.group(0)], template or DEFAULT_PROMPT_TEMPLATE)
