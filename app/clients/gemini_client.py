import logging
from typing import Optional, Sequence

try:
    from google import genai
    from google.genai import errors as genai_errors
    from google.genai import types as genai_types
except ImportError as exc:  # pragma: no cover - import guard
    raise ImportError(
        "google-genai must be installed. Run 'pip install -e .' to install the service dependencies."
    ) from exc
from tenacity import AsyncRetrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_fixed


class GeminiClientError(Exception):
    """Raised when Gemini could not return a usable response."""


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, TypeError):
        return False
    # 4xx means the request itself is wrong; only rate limiting is worth another try.
    if isinstance(exc, genai_errors.ClientError):
        return exc.code == 429
    return True


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str],
        model_name: str,
        model_preferences: Sequence[str] = (),
        timeout_seconds: int = 60,
        max_output_tokens: int = 4096,
        temperature: float = 0.7,
        log_models_on_start: bool = False,
    ) -> None:
        self.logger = logging.getLogger(__name__)
        self.api_key = api_key
        self.model_name = model_name
        self.model_preferences = list(model_preferences)
        self.timeout_seconds = timeout_seconds
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature
        self.log_models_on_start = log_models_on_start
        self._client = None
        self._resolved_model: str | None = None

    def _get_client(self):
        # Created on first use so the service can boot without credentials.
        if self._client is None:
            if not self.api_key:
                raise GeminiClientError("GEMINI_API_KEY is not configured in environment variables")
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=genai_types.HttpOptions(timeout=self.timeout_seconds * 1000),
            )
            if self.log_models_on_start:
                self._log_available_models()
        return self._client

    def _log_available_models(self) -> None:
        try:
            models = self._client.models.list()
            available = [m.name for m in models]
            sample = ", ".join(available[:5])
            self.logger.info("Gemini available models (sample): %s", sample or "none")
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("Failed to list Gemini models: %s", exc)

    async def _resolve_model(self) -> str:
        if self._resolved_model:
            return self._resolved_model

        try:
            pager = await self._get_client().aio.models.list()
            models = [m async for m in pager]
        except GeminiClientError:
            raise
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("Listing Gemini models failed; using configured model %s: %s", self.model_name, exc)
            self._resolved_model = self._ensure_model_path(self.model_name)
            return self._resolved_model

        supported = []
        for m in models:
            actions = getattr(m, "supported_actions", None) or getattr(m, "supported_generation_methods", None)
            if actions is None or "generateContent" in actions:
                supported.append(m.name)

        if not supported:
            self.logger.warning("No model reports generateContent support; using configured model %s", self.model_name)
            self._resolved_model = self._ensure_model_path(self.model_name)
            return self._resolved_model

        # Preference order: explicit model name, then preference list, then first supported.
        normalized_supported = {self._normalize_model_name(n): n for n in supported}
        for candidate in [self.model_name, *self.model_preferences]:
            normalized = self._normalize_model_name(candidate)
            exact = normalized_supported.get(normalized)
            if exact:
                self._resolved_model = self._ensure_model_path(exact)
                break
            prefixed = next((orig for key, orig in normalized_supported.items() if key.startswith(normalized)), None)
            if prefixed:
                self._resolved_model = self._ensure_model_path(prefixed)
                break

        if not self._resolved_model:
            self._resolved_model = self._ensure_model_path(supported[0])
            self.logger.warning("Preferred Gemini model not found; falling back to %s", self._resolved_model)
        else:
            self.logger.info("Using Gemini model: %s", self._resolved_model)
        return self._resolved_model

    def _normalize_model_name(self, name: str) -> str:
        return name.replace("models/", "").split(":")[0].strip()

    def _ensure_model_path(self, name: str) -> str:
        name = self._normalize_model_name(name)
        return f"models/{name}"

    async def generate(
        self,
        prompt: str,
        *,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
        model: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ) -> str:
        """
        Send the prompt to Gemini and return the response text.

        Transient failures are retried up to max_retries attempts with a fixed
        retry_delay (seconds) between them. Raises GeminiClientError once the
        attempts are exhausted.
        """
        client = self._get_client()
        model_name = self._ensure_model_path(model) if model else await self._resolve_model()
        config = genai_types.GenerateContentConfig(
            temperature=self.temperature if temperature is None else temperature,
            max_output_tokens=max_output_tokens or self.max_output_tokens,
        )

        try:
            async for attempt in AsyncRetrying(
                reraise=True,
                stop=stop_after_attempt(max(1, max_retries)),
                wait=wait_fixed(retry_delay),
                retry=retry_if_exception(_is_retryable),
                before_sleep=before_sleep_log(self.logger, logging.WARNING),
            ):
                with attempt:
                    response = await client.aio.models.generate_content(
                        model=model_name,
                        contents=prompt,
                        config=config,
                    )
                    text = self._extract_text(response)
                    if not text:
                        raise GeminiClientError("Unexpected response structure from Gemini API")
                    return text
        except Exception as exc:  # noqa: BLE001
            raise GeminiClientError(f"Gemini request failed with model={model_name}: {exc}") from exc

    def _extract_text(self, response) -> str:
        if getattr(response, "text", None):
            return response.text
        candidates = getattr(response, "candidates", None)
        if candidates:
            parts = []
            for part in getattr(candidates[0].content, "parts", None) or []:
                text = getattr(part, "text", None)
                if text:
                    parts.append(text)
            if parts:
                return "\n".join(parts)
        return ""
