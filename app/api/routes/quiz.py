import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.config import Settings, get_settings
from app.core.positions import get_position_metadata
from app.schemas.quiz_schema import GenerationOptions, QuizGenerateRequest, QuizGenerateResponse
from app.services.quiz.errors import (
    ContentExtractionError,
    GenerationServiceError,
    QuizGenerationError,
    SchemaValidationError,
)
from app.services.quiz_generator_service import QuizGeneratorService, create_quiz_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai/quiz", tags=["quiz"])


@lru_cache
def get_quiz_service() -> QuizGeneratorService:
    return create_quiz_service(get_settings())


def build_generation_options(body: QuizGenerateRequest, settings: Settings) -> GenerationOptions:
    position = get_position_metadata(body.position)
    return GenerationOptions(
        topic=body.topic,
        language=body.language,
        position=position.slug,
        difficulty_text=position.difficulty_text,
        position_instruction=position.position_instruction,
        position_level=position.level,
        temperature=body.temperature if body.temperature is not None else settings.quiz_temperature,
        max_output_tokens=body.max_output_tokens or settings.quiz_max_output_tokens,
        model=body.model,
    )


@router.post(
    "/generate",
    response_model=QuizGenerateResponse,
    status_code=status.HTTP_200_OK,
    summary="Generate multiple-choice interview questions",
)
async def generate_quiz(
    body: QuizGenerateRequest,
    settings: Settings = Depends(get_settings),
    service: QuizGeneratorService = Depends(get_quiz_service),
) -> QuizGenerateResponse:
    options = build_generation_options(body, settings)
    try:
        result = await service.generate(options, strict_mode=body.strict_mode)
    except GenerationServiceError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except (ContentExtractionError, SchemaValidationError) as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except QuizGenerationError as exc:
        logger.exception("quiz generation failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    return QuizGenerateResponse(
        request_id=result.request_id,
        artifact_path=str(result.artifact_path),
        questions=result.questions,
        warnings=result.warnings,
    )
