"""OpenAI chat completions provider."""

import logging
from typing import Any

import openai
from openai import AsyncOpenAI

from app.core.config import Settings
from app.exceptions.inference import (
    InferenceConfigurationError,
    InferenceProviderError,
    InferenceTimeoutError,
    map_inference_error,
)

from .base import InferenceProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(InferenceProvider):
    name = "openai"

    def __init__(self, config: Settings, client: AsyncOpenAI | None = None):
        super().__init__(config)
        if client is None:
            if not config.openai_api_key:
                raise InferenceConfigurationError("OPENAI_API_KEY is not defined in environment variables")
            client = AsyncOpenAI(
                api_key=config.openai_api_key,
                timeout=config.ai_request_timeout,
                max_retries=0,
            )
        self.client = client

    @property
    def model(self) -> str:
        return self.config.openai_model

    async def _complete(
        self, messages: list[dict[str, str]], max_tokens: int | None
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if max_tokens:
            kwargs["max_tokens"] = max_tokens
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                **kwargs,
            )
        except openai.APITimeoutError as e:
            logger.error("OpenAI request timed out: %s", str(e))
            raise InferenceTimeoutError(str(e)) from e
        except openai.RateLimitError as e:
            logger.warning("OpenAI rate limit hit: %s", e.message)
            error_type = e.type or e.code or "rate_limit_exceeded"
            if error_type not in ("rate_limit_exceeded", "insufficient_quota"):
                error_type = "rate_limit_exceeded"
            raise map_inference_error(error_type, e.message, e.status_code) from e
        except openai.APIStatusError as e:
            logger.error("OpenAI API error %s: %s", e.status_code, e.message)
            raise map_inference_error(e.type or e.code, e.message, e.status_code) from e
        except openai.APIError as e:
            logger.error("OpenAI API error: %s", e.message)
            raise map_inference_error(e.type or e.code or "api_error", e.message) from e

        if not completion.choices:
            raise InferenceProviderError(
                upstream_message="Empty response from inference provider",
                upstream_type="empty_response",
            )
        return completion.choices[0].message.model_dump()
