from datetime import datetime
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.positions import VALID_POSITIONS, is_valid_position

Difficulty = Literal["easy", "medium", "hard"]


class QuestionFormat(BaseModel):
    """Shape description echoed into the prompt; never validated against."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    schema_: Any = Field(None, alias="schema")
    example: Any = None


class GenerationOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    topic: Optional[str] = None
    language: Optional[str] = None
    position: Optional[str] = None
    difficulty_text: Optional[str] = Field(None, alias="difficultyText")
    position_instruction: Optional[str] = Field(None, alias="positionInstruction")
    position_level: Optional[int] = Field(None, alias="positionLevel")
    temperature: Optional[float] = None
    max_output_tokens: Optional[int] = Field(None, alias="maxOutputTokens")
    model: Optional[str] = None


class GenerationMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    request_id: str
    options: GenerationOptions


class QuizQuestion(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    question: str = Field(..., min_length=1)
    options: list[str] = Field(..., min_length=4, max_length=4)
    correct_answer: int = Field(..., ge=0, le=3, alias="correctAnswer")
    explanation: str = Field(..., min_length=1)
    difficulty: Difficulty
    category: str = Field(..., min_length=1)


class FieldWarning(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    field: str
    message: str


class GenerationResult(BaseModel):
    request_id: str
    artifact_path: Path
    questions: list[QuizQuestion]
    warnings: list[FieldWarning] = Field(default_factory=list)


class QuizGenerateRequest(BaseModel):
    topic: str = Field(..., min_length=1, description="Technical topic of the questions")
    language: str = Field(..., min_length=1, description="Programming language")
    position: str = Field(..., description=f"One of: {', '.join(VALID_POSITIONS)}")
    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_output_tokens: Optional[int] = Field(None, ge=1)
    model: Optional[str] = None
    strict_mode: Optional[bool] = Field(None, description="Reject the batch on any schema violation")

    @field_validator("position")
    @classmethod
    def _known_position(cls, value: str) -> str:
        if not is_valid_position(value):
            raise ValueError(f"Position must be one of: {', '.join(VALID_POSITIONS)}")
        return value.strip().lower()


class QuizGenerateResponse(BaseModel):
    request_id: str
    artifact_path: str
    questions: list[QuizQuestion]
    warnings: list[FieldWarning]
