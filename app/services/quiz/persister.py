import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Sequence

from app.schemas.quiz_schema import QuizQuestion
from app.services.quiz.errors import PersistenceError

logger = logging.getLogger(__name__)


def _write_artifact(questions: Sequence[QuizQuestion], output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(
        [question.model_dump(by_alias=True) for question in questions],
        indent=2,
        ensure_ascii=False,
    )

    # Never overwrite an earlier batch saved in the same millisecond.
    stamp = int(time.time() * 1000)
    while True:
        file_path = output_dir / f"{stamp}.json"
        try:
            with file_path.open("x", encoding="utf-8") as fp:
                fp.write(payload)
        except FileExistsError:
            stamp += 1
            continue
        return file_path


async def save_generated_questions(questions: Sequence[QuizQuestion], output_dir: str | Path) -> Path:
    """Write the validated batch to <output_dir>/<epoch-ms>.json and return its path."""
    try:
        file_path = await asyncio.to_thread(_write_artifact, questions, Path(output_dir))
    except OSError as exc:
        raise PersistenceError(f"Failed to save generated questions: {exc}") from exc

    logger.info("Saved %d questions to %s", len(questions), file_path)
    return file_path
