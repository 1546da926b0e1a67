"""Inference provider interface."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.core.config import Settings
from app.exceptions.inference import InferenceRateLimitError

logger = logging.getLogger(__name__)


class InferenceProvider(ABC):
    """Turns an ordered list of role/content turns into one completion turn."""

    name: str

    def __init__(self, config: Settings):
        self.config = config

    @property
    @abstractmethod
    def model(self) -> str:
        """Model identifier sent upstream."""

    async def complete(
        self, messages: list[dict[str, str]], max_tokens: int | None = None
    ) -> dict[str, Any]:
        """Send messages and return the provider's reply message.

        Rate-limited calls are retried with exponential backoff. Every other
        failure is raised immediately as an ``InferenceProviderError``.
        """
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(InferenceRateLimitError),
            stop=stop_after_attempt(self.config.ai_max_retry_attempts),
            wait=wait_exponential(
                multiplier=self.config.ai_retry_backoff_factor,
                min=self.config.ai_retry_min_wait,
                max=self.config.ai_retry_max_wait,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self._complete(messages, max_tokens or self.config.ai_max_tokens)

    @abstractmethod
    async def _complete(
        self, messages: list[dict[str, str]], max_tokens: int | None
    ) -> dict[str, Any]:
        """Make a single upstream call."""
