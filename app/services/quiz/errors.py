class QuizGenerationError(Exception):
    """Raised when a quiz batch cannot be generated."""


class FormatLoadError(QuizGenerationError):
    """The question format document is missing or unreadable."""


class ContextLoadError(QuizGenerationError):
    """The existing-questions file exists but cannot be read."""


class GenerationServiceError(QuizGenerationError):
    """The generation client gave up after its own retries."""


class ContentExtractionError(QuizGenerationError):
    """No JSON array could be recovered from the model output."""


class SchemaValidationError(QuizGenerationError):
    """A question failed validation; carries the 0-based index and field name."""

    def __init__(self, index: int, field: str, message: str) -> None:
        self.index = index
        self.field = field
        super().__init__(f"Question at index {index} has invalid '{field}': {message}")


class PersistenceError(QuizGenerationError):
    """The generated batch could not be written to disk."""
