from pathlib import Path

import pytest

from app.schemas.quiz_schema import GenerationResult
from app.services.quiz.errors import GenerationServiceError
from app.services.quiz_generator_service import QuizPipelineConfig
from scripts import generate_questions


class FakeService:
    def __init__(self, error=None):
        self.error = error
        self.config = QuizPipelineConfig(format_path=Path("f.json"), output_dir=Path("out"), log_dir=Path("logs"))
        self.calls = []

    async def generate(self, options, *, existing_questions_path=None, strict_mode=None):
        self.calls.append((options, existing_questions_path, strict_mode))
        if self.error:
            raise self.error
        return GenerationResult(request_id="r", artifact_path=self.config.output_dir / "1.json", questions=[])


@pytest.fixture
def fake_service(monkeypatch):
    service = FakeService()
    monkeypatch.setattr(generate_questions, "create_quiz_service", lambda settings: service)
    return service


def test_cli_runs_pipeline(fake_service, tmp_path, capsys):
    exit_code = generate_questions.main(
        [
            "--topic", "Generators",
            "--language", "Python",
            "--position", "JUNIOR",
            "--output-dir", str(tmp_path),
            "--temperature", "0.3",
            "--strict",
        ]
    )

    assert exit_code == 0
    options, existing, strict_mode = fake_service.calls[0]
    assert options.position == "junior"
    assert options.position_level == 3
    assert options.temperature == 0.3
    assert existing is None
    assert strict_mode is True
    assert fake_service.config.output_dir == tmp_path
    assert str(tmp_path) in capsys.readouterr().out


def test_cli_reports_failure(fake_service, capsys):
    fake_service.error = GenerationServiceError("Failed to generate content from Gemini API: timeout")
    exit_code = generate_questions.main(["--topic", "t", "--language", "l", "--position", "senior"])
    assert exit_code == 1
    assert "Generation failed" in capsys.readouterr().out


def test_cli_rejects_unknown_position():
    with pytest.raises(SystemExit):
        generate_questions.main(["--topic", "t", "--language", "l", "--position", "ceo"])
