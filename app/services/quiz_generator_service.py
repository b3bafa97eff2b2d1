import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol
from uuid import uuid4

from app.clients.gemini_client import GeminiClient
from app.core.config import Settings
from app.schemas.quiz_schema import GenerationMetadata, GenerationOptions, GenerationResult
from app.services.quiz.conversation_log import ConversationLogger
from app.services.quiz.errors import (
    ContentExtractionError,
    ContextLoadError,
    FormatLoadError,
    GenerationServiceError,
    PersistenceError,
    SchemaValidationError,
)
from app.services.quiz.extractors import extract_questions_array
from app.services.quiz.format_loader import load_existing_questions, load_question_format
from app.services.quiz.persister import save_generated_questions
from app.services.quiz.prompt_builder import construct_prompt
from app.services.quiz.validators import validate_questions

CONTENT_PREVIEW_CHARS = 200


class GenerationClient(Protocol):
    async def generate(
        self,
        prompt: str,
        *,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
        model: Optional[str] = None,
        max_retries: int,
        retry_delay: float,
    ) -> str: ...


@dataclass(frozen=True)
class QuizPipelineConfig:
    format_path: Path
    output_dir: Path
    log_dir: Path
    existing_questions_path: Optional[Path] = None
    prompt_template: Optional[str] = None
    max_retries: int = 3
    retry_delay: float = 1.0
    strict_mode: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "QuizPipelineConfig":
        return cls(
            format_path=settings.quiz_format_path,
            output_dir=settings.quiz_output_dir,
            log_dir=settings.quiz_log_dir,
            existing_questions_path=settings.quiz_existing_questions_path,
            prompt_template=settings.quiz_prompt_template,
            max_retries=settings.gemini_max_retries,
            retry_delay=settings.gemini_retry_delay_seconds,
            strict_mode=settings.quiz_strict_mode,
        )


@dataclass
class QuizGeneratorService:
    """
    Generates a validated batch of interview questions with Gemini.

    Load format/context -> build prompt -> call the model -> extract JSON ->
    validate/repair -> write artifact. Every outcome is appended to the
    conversation log under the request id before errors propagate.
    """

    llm_client: GenerationClient
    config: QuizPipelineConfig
    conversation_log: Optional[ConversationLogger] = None
    logger: logging.Logger = logging.getLogger(__name__)

    def __post_init__(self) -> None:
        if self.conversation_log is None:
            self.conversation_log = ConversationLogger(self.config.log_dir)

    async def generate(
        self,
        options: Optional[GenerationOptions] = None,
        *,
        existing_questions_path: Optional[Path] = None,
        strict_mode: Optional[bool] = None,
    ) -> GenerationResult:
        options = options or GenerationOptions()
        strict = self.config.strict_mode if strict_mode is None else strict_mode
        metadata = GenerationMetadata(
            timestamp=datetime.now(timezone.utc),
            request_id=uuid4().hex,
            options=options,
        )
        request_id = metadata.request_id
        self.logger.info(
            "quiz generation started",
            extra={
                "request_id": request_id,
                "topic": options.topic,
                "language": options.language,
                "position": options.position,
                "position_level": options.position_level,
                "strict_mode": strict,
            },
        )

        context_path = existing_questions_path or self.config.existing_questions_path
        try:
            question_format = await load_question_format(self.config.format_path)
            existing_questions = await load_existing_questions(context_path)
        except (FormatLoadError, ContextLoadError) as exc:
            self.logger.error("Quiz inputs could not be loaded: %s", exc)
            await self.conversation_log.log_error(request_id, str(exc), kind="LOAD ERROR")
            raise
        self.logger.info("Loaded %d existing questions for dedup", len(existing_questions))

        prompt = construct_prompt(
            question_format,
            existing_questions,
            options,
            template=self.config.prompt_template,
        )
        await self.conversation_log.log_metadata(request_id, metadata)
        await self.conversation_log.log_prompt(request_id, prompt)

        raw = await self._call_model(request_id, prompt, options)

        try:
            candidates = extract_questions_array(raw, strict_mode=strict)
        except ContentExtractionError as exc:
            preview = raw[:CONTENT_PREVIEW_CHARS] if isinstance(raw, str) else repr(raw)[:CONTENT_PREVIEW_CHARS]
            self.logger.error("Content extraction failed: %s | preview=%r", exc, preview)
            await self.conversation_log.log_error(request_id, str(exc), kind="EXTRACTION ERROR")
            raise ContentExtractionError(f"{exc}. Content: {preview}...") from exc

        try:
            report = validate_questions(candidates, strict_mode=strict)
        except SchemaValidationError as exc:
            self.logger.error("Question validation failed: %s", exc)
            await self.conversation_log.log_error(request_id, str(exc), kind="VALIDATION ERROR")
            raise

        try:
            artifact_path = await save_generated_questions(report.questions, self.config.output_dir)
        except PersistenceError as exc:
            self.logger.error("Saving generated questions failed: %s", exc)
            await self.conversation_log.log_error(request_id, str(exc), kind="PERSISTENCE ERROR")
            raise

        await self.conversation_log.log_outcome(
            request_id,
            {
                "artifactPath": str(artifact_path),
                "questions": len(report.questions),
                "repairs": [warning.model_dump() for warning in report.warnings],
            },
        )
        self.logger.info(
            "quiz generation completed",
            extra={
                "request_id": request_id,
                "questions": len(report.questions),
                "repairs": len(report.warnings),
                "artifact_path": str(artifact_path),
            },
        )
        return GenerationResult(
            request_id=request_id,
            artifact_path=artifact_path,
            questions=report.questions,
            warnings=report.warnings,
        )

    async def _call_model(self, request_id: str, prompt: str, options: GenerationOptions) -> str:
        self.logger.info("Sending request to Gemini AI", extra={"request_id": request_id})
        try:
            raw = await self.llm_client.generate(
                prompt,
                temperature=options.temperature,
                max_output_tokens=options.max_output_tokens,
                model=options.model,
                max_retries=self.config.max_retries,
                retry_delay=self.config.retry_delay,
            )
        except Exception as exc:  # noqa: BLE001
            self.logger.error("Failed to generate content from Gemini AI: %s", exc)
            await self.conversation_log.log_error(request_id, str(exc))
            raise GenerationServiceError(f"Failed to generate content from Gemini API: {exc}") from exc

        await self.conversation_log.log_response(request_id, raw)
        return raw


def create_quiz_service(settings: Settings) -> QuizGeneratorService:
    gemini_client = GeminiClient(
        api_key=settings.gemini_api_key,
        model_name=settings.gemini_model,
        model_preferences=settings.gemini_model_preferences,
        timeout_seconds=settings.gemini_timeout_seconds,
        max_output_tokens=settings.gemini_max_output_tokens,
        temperature=settings.gemini_temperature,
        log_models_on_start=settings.gemini_log_models_on_start,
    )
    return QuizGeneratorService(llm_client=gemini_client, config=QuizPipelineConfig.from_settings(settings))
