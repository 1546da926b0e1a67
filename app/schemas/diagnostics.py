"""Diagnostic endpoint schemas."""

from typing import Any

from pydantic import Field

from .base import BaseSchema


class EnvVarStatus(BaseSchema):
    key: str
    exists: bool


class CheckResponse(BaseSchema):
    """Whether configuration is present. Never carries values."""

    status: str
    key_exists: bool
    env_vars: list[EnvVarStatus] = Field(default_factory=list)


class InferenceTestResponse(BaseSchema):
    status: str
    message: str
    provider: str | None = None
    test_response: dict[str, Any] | None = None
