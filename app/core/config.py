# python
# app/core/config.py
"""Configuration settings for the SeaChat backend.

Uses Pydantic BaseSettings for environment variable management.
"""
import secrets
from enum import Enum

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentEnum(str, Enum):
    development = "development"
    testing = "testing"
    staging = "staging"
    production = "production"


class LogLevelEnum(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormatEnum(str, Enum):
    simple = "simple"
    json = "json"


class InferenceProviderEnum(str, Enum):
    openai = "openai"
    gemini = "gemini"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ===== Application Settings =====
    app_name: str = Field(default="SeaChat API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")

    # ===== Session Settings =====
    session_secret: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32),
        validation_alias=AliasChoices("session_secret", "nextauth_secret"),
        description="Secret used to sign session tokens",
    )
    algorithm: str = Field(default="HS256", description="Session token algorithm")
    session_cookie_name: str = Field(default="session-token", description="Session cookie name")
    access_token_expire_minutes: int = Field(default=60 * 24 * 30, description="Session lifetime")

    # ===== Auth Provider (Google OAuth) =====
    google_client_id: str | None = Field(default=None, description="Google OAuth client ID")
    google_client_secret: str | None = Field(default=None, description="Google OAuth client secret")

    # ===== Database Settings =====
    database_url: str | None = Field(default=None, description="Database connection URL")
    db_pool_size: int = Field(default=20, description="Database connection pool size")
    db_max_overflow: int = Field(default=0, description="Database max overflow connections")

    # ===== Inference Provider =====
    inference_provider: InferenceProviderEnum = Field(
        default=InferenceProviderEnum.openai, description="Which model API answers chat turns"
    )
    openai_api_key: str | None = Field(default=None, description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o", description="OpenAI chat model")
    gemini_api_key: str | None = Field(default=None, description="Google Gemini API key")
    gemini_model: str = Field(default="gemini-1.5-flash", description="Gemini model to use")
    ai_max_tokens: int | None = Field(default=None, description="Maximum tokens per reply")
    ai_request_timeout: int = Field(default=60, description="AI request timeout in seconds")
    ai_max_retry_attempts: int = Field(default=3, description="Attempts for rate-limited calls")
    ai_retry_backoff_factor: float = Field(default=2.0, description="Exponential backoff multiplier")
    ai_retry_min_wait: int = Field(default=1, description="Minimum retry wait in seconds")
    ai_retry_max_wait: int = Field(default=30, description="Maximum retry wait in seconds")

    # ===== CORS Settings =====
    allowed_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")
    log_format: LogFormatEnum = Field(default=LogFormatEnum.simple, description="Log format")

    # ===== Server Settings =====
    host: str = Field(default="127.0.0.1", description="Host to bind the server")
    port: int = Field(default=8000, description="Port to bind the server")

    # ===== Computed Properties =====
    @property
    def is_development(self) -> bool:
        return self.environment == EnvironmentEnum.development

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.production

    @property
    def is_testing(self) -> bool:
        return self.environment == EnvironmentEnum.testing

    @property
    def inference_api_key(self) -> str | None:
        if self.inference_provider == InferenceProviderEnum.gemini:
            return self.gemini_api_key
        return self.openai_api_key

    @property
    def inference_api_key_name(self) -> str:
        """Environment variable that holds the active provider's key."""
        return f"{self.inference_provider.value.upper()}_API_KEY"

    @property
    def has_ai_enabled(self) -> bool:
        return bool(self.inference_api_key)

    @property
    def has_auth_provider(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    @property
    def has_session_secret(self) -> bool:
        """False when the secret is the per-process random default."""
        return "session_secret" in self.model_fields_set

    # ===== Validation Methods =====
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["dev", "develop"]:
                return "development"
            if lv in ["prod"]:
                return "production"
            if lv in ["test"]:
                return "testing"
            return lv
        return v

    @field_validator("inference_provider", mode="before")
    @classmethod
    def validate_inference_provider(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["google", "google-gemini"]:
                return "gemini"
            return lv
        return v

    @field_validator("database_url", mode="before")
    @classmethod
    def normalize_database_url(cls, v):
        # Hosted Postgres URLs come without an async driver
        if isinstance(v, str):
            v = v.strip() or None
            if v and v.startswith("postgres://"):
                v = v.replace("postgres://", "postgresql+asyncpg://", 1)
            elif v and v.startswith("postgresql://"):
                v = v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v


settings = Settings()


class ConfigValidator:
    @staticmethod
    def validate_required_settings(config: Settings | None = None):
        config = config or settings
        errors = []
        if not config.database_url:
            errors.append("DATABASE_URL is required")
        if not config.inference_api_key:
            errors.append(f"{config.inference_api_key_name} is required")
        if config.is_production and not config.has_auth_provider:
            errors.append("GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET are required in production")
        if config.is_production and not config.has_session_secret:
            errors.append("SESSION_SECRET is required in production")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

    @staticmethod
    def get_feature_status(config: Settings | None = None) -> dict:
        config = config or settings
        return {
            "ai_enabled": config.has_ai_enabled,
            "inference_provider": config.inference_provider.value,
            "persistence_enabled": bool(config.database_url),
            "auth_provider_configured": config.has_auth_provider,
            "environment": config.environment.value,
        }


def get_config_summary(config: Settings | None = None) -> dict:
    config = config or settings
    return {
        "app_name": config.app_name,
        "version": config.version,
        "environment": config.environment.value,
        "debug": config.debug,
        "features": ConfigValidator.get_feature_status(config),
        "database_configured": bool(config.database_url),
    }


__all__ = [
    "settings",
    "Settings",
    "ConfigValidator",
    "get_config_summary",
    "EnvironmentEnum",
    "LogLevelEnum",
    "LogFormatEnum",
    "InferenceProviderEnum",
]
