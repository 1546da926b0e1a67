"""Google Gemini provider."""

import logging
from typing import Any

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from google.generativeai.types import HarmBlockThreshold, HarmCategory

from app.core.config import Settings
from app.exceptions.inference import (
    InferenceConfigurationError,
    InferenceProviderError,
    InferenceRateLimitError,
    InferenceTimeoutError,
)

from .base import InferenceProvider

logger = logging.getLogger(__name__)


def build_contents(messages: list[dict[str, str]]) -> tuple[str | None, list[dict[str, Any]]]:
    """Split system turns into an instruction and map the rest to Gemini roles."""
    system_parts = []
    contents = []
    for msg in messages:
        role = msg["role"]
        if role == "system":
            system_parts.append(msg["content"])
        elif role == "assistant":
            contents.append({"role": "model", "parts": [msg["content"]]})
        else:
            contents.append({"role": "user", "parts": [msg["content"]]})
    system_instruction = "\n\n".join(system_parts) if system_parts else None
    return system_instruction, contents


class GeminiProvider(InferenceProvider):
    name = "gemini"

    def __init__(self, config: Settings):
        super().__init__(config)
        if not config.gemini_api_key:
            raise InferenceConfigurationError("GEMINI_API_KEY is not defined in environment variables")
        genai.configure(api_key=config.gemini_api_key)
        logger.info("Gemini client configured with model: %s", config.gemini_model)

    @property
    def model(self) -> str:
        return self.config.gemini_model

    def _build_model(self, system_instruction: str | None, max_tokens: int | None):
        return genai.GenerativeModel(
            model_name=self.model,
            system_instruction=system_instruction,
            safety_settings={
                HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
            },
            generation_config=genai.types.GenerationConfig(
                candidate_count=1,
                max_output_tokens=max_tokens,
            ),
        )

    async def _complete(
        self, messages: list[dict[str, str]], max_tokens: int | None
    ) -> dict[str, Any]:
        system_instruction, contents = build_contents(messages)
        model = self._build_model(system_instruction, max_tokens)
        try:
            response = await model.generate_content_async(
                contents,
                request_options={"timeout": self.config.ai_request_timeout},
            )
        except google_exceptions.ResourceExhausted as e:
            logger.warning("Gemini rate limit hit: %s", str(e))
            raise InferenceRateLimitError(str(e), "rate_limit_exceeded", 429) from e
        except google_exceptions.DeadlineExceeded as e:
            logger.error("Gemini request timed out: %s", str(e))
            raise InferenceTimeoutError(str(e)) from e
        except google_exceptions.GoogleAPICallError as e:
            logger.error("Gemini API error: %s", str(e))
            raise InferenceProviderError(
                upstream_message=str(e),
                upstream_type=type(e).__name__,
                upstream_status=e.code,
            ) from e

        if not response.candidates:
            logger.error("Gemini response has no candidates: %s", response.prompt_feedback)
            raise InferenceProviderError(
                upstream_message="Content was blocked by safety filters",
                upstream_type="content_filtered",
            )
        try:
            text = response.text
        except ValueError as e:
            raise InferenceProviderError(
                upstream_message=f"Unreadable response: {str(e)}",
                upstream_type="parsing_error",
            ) from e
        return {"role": "assistant", "content": text}
