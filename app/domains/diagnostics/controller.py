"""Diagnostic endpoints for configuration and upstream connectivity."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.core.config import Settings
from app.core.dependencies import get_inference_provider, get_settings
from app.exceptions.inference import (
    InferenceConfigurationError,
    InferenceProviderError,
    error_details,
)
from app.schemas.diagnostics import CheckResponse, EnvVarStatus, InferenceTestResponse


logger = logging.getLogger(__name__)

router = APIRouter(tags=["diagnostics"])

TEST_MESSAGES = [
    {"role": "system", "content": "You are a test assistant."},
    {"role": "user", "content": "Test connection"},
]


def configured_env_vars(config: Settings) -> list[EnvVarStatus]:
    """Presence of each externally supplied setting. Values are never exposed."""
    return [
        EnvVarStatus(key="OPENAI_API_KEY", exists=bool(config.openai_api_key)),
        EnvVarStatus(key="GEMINI_API_KEY", exists=bool(config.gemini_api_key)),
        EnvVarStatus(key="DATABASE_URL", exists=bool(config.database_url)),
        EnvVarStatus(key="GOOGLE_CLIENT_ID", exists=bool(config.google_client_id)),
        EnvVarStatus(key="GOOGLE_CLIENT_SECRET", exists=bool(config.google_client_secret)),
        EnvVarStatus(key="SESSION_SECRET", exists=config.has_session_secret),
    ]


@router.get("/check", response_model=CheckResponse)
async def check_configuration(config: Settings = Depends(get_settings)):
    """Report whether the inference API key is set."""
    key_exists = config.has_ai_enabled
    return CheckResponse(
        status="API key is set" if key_exists else "API key is missing",
        key_exists=key_exists,
        env_vars=configured_env_vars(config),
    )


@router.get("/test-inference", response_model=InferenceTestResponse)
async def run_inference_test(request: Request):
    """Make a minimal round trip to the configured inference provider."""
    try:
        provider = await get_inference_provider(request)
    except InferenceConfigurationError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"status": "error", "message": e.message},
        )

    try:
        reply = await provider.complete(TEST_MESSAGES, max_tokens=5)
    except InferenceProviderError as e:
        logger.error("Inference connection test failed: %s", e.upstream_message)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "error",
                "message": f"Failed to connect to {provider.name} API",
                **error_details(e),
            },
        )

    return InferenceTestResponse(
        status="success",
        message=f"{provider.name} API connection successful",
        provider=provider.name,
        test_response=reply,
    )
