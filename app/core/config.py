import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_QUESTION_FORMAT_PATH = Path(__file__).resolve().parent.parent / "resources" / "question_format.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    gemini_api_key: Optional[str] = Field(None, alias="GEMINI_API_KEY")
    gemini_model: str = Field("models/gemini-2.0-flash", alias="GEMINI_MODEL")
    gemini_model_preferences: list[str] = Field(
        default_factory=lambda: [
            "models/gemini-2.0-flash",
            "models/gemini-2.5-flash",
        ],
        alias="GEMINI_MODEL_PREFERRED",
    )
    gemini_log_models_on_start: bool = Field(False, alias="GEMINI_LOG_MODELS_ON_START")
    gemini_timeout_seconds: int = Field(60, alias="GEMINI_TIMEOUT_SECONDS")
    gemini_max_output_tokens: int = Field(4096, alias="GEMINI_MAX_OUTPUT_TOKENS")
    gemini_temperature: float = Field(0.7, alias="GEMINI_TEMPERATURE")
    gemini_max_retries: int = Field(3, ge=1, alias="GEMINI_MAX_RETRIES")
    gemini_retry_delay_seconds: float = Field(1.0, ge=0, alias="GEMINI_RETRY_DELAY_SECONDS")

    # Quiz pipeline
    quiz_prompt_template: Optional[str] = Field(None, alias="AI_QUIZ_PROMPT_TEMPLATE")
    quiz_format_path: Path = Field(DEFAULT_QUESTION_FORMAT_PATH, alias="QUIZ_FORMAT_PATH")
    quiz_existing_questions_path: Optional[Path] = Field(None, alias="QUIZ_EXISTING_QUESTIONS_PATH")
    quiz_output_dir: Path = Field(Path(tempfile.gettempdir()), alias="GEMINI_TMP_DIR")
    quiz_log_dir: Path = Field(Path("logs"), alias="QUIZ_LOG_DIR")
    quiz_strict_mode: bool = Field(False, alias="QUIZ_STRICT_MODE")

    # Generation parameters sent with every quiz request
    quiz_temperature: float = Field(0.7, alias="QUIZ_TEMPERATURE")
    quiz_max_output_tokens: int = Field(8192, alias="QUIZ_MAX_OUTPUT_TOKENS")

    @field_validator("gemini_model_preferences", mode="before")
    @classmethod
    def _split_preferences(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("quiz_prompt_template", mode="before")
    @classmethod
    def _blank_template_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
