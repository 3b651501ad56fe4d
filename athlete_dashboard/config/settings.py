from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_DATA_BACKENDS = {"fixtures", "http"}
VALID_NARRATIVE_PROVIDERS = {"google", "openai"}


class Settings(BaseSettings):
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    data_backend: str = Field(
        default="fixtures",
        validation_alias="DATA_BACKEND",
        description="Where dashboard records come from: 'fixtures' or 'http'",
    )
    data_backend_url: str = Field(
        default="http://localhost:8000/api",  # Default for local dev; MUST be set to the real backend in production
        validation_alias="DATA_BACKEND_URL",
    )
    data_backend_timeout_seconds: float = Field(
        default=10.0,
        validation_alias="DATA_BACKEND_TIMEOUT_SECONDS",
        gt=0,
    )
    fixture_latency_seconds: float = Field(
        default=0.5,
        validation_alias="FIXTURE_LATENCY_SECONDS",
        ge=0,
        description="Artificial delay applied to every fixture read",
    )
    narrative_enabled: bool = Field(
        default=True,
        validation_alias="NARRATIVE_ENABLED",
        description="Disable to serve the static fallback narratives without calling the model",
    )
    narrative_provider: str = Field(default="google", validation_alias="NARRATIVE_PROVIDER")
    narrative_model: str = Field(default="gemini-2.5-flash", validation_alias="NARRATIVE_MODEL")
    narrative_timeout_seconds: float = Field(
        default=30.0,
        validation_alias="NARRATIVE_TIMEOUT_SECONDS",
        gt=0,
    )
    openai_api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    gemini_api_key: str = Field(default="", validation_alias="GEMINI_API_KEY")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("data_backend")
    @classmethod
    def validate_data_backend(cls, value: str) -> str:
        lower_value = value.lower()
        if lower_value not in VALID_DATA_BACKENDS:
            raise ValueError(f"DATA_BACKEND must be one of {sorted(VALID_DATA_BACKENDS)}, got '{value}'")
        return lower_value

    @field_validator("narrative_provider")
    @classmethod
    def validate_narrative_provider(cls, value: str) -> str:
        """Validate that the LLM provider is one get_model() can build."""
        lower_value = value.lower()
        if lower_value not in VALID_NARRATIVE_PROVIDERS:
            raise ValueError(f"NARRATIVE_PROVIDER must be one of {sorted(VALID_NARRATIVE_PROVIDERS)}, got '{value}'")
        return lower_value


settings = Settings()

if settings.narrative_enabled and not (settings.openai_api_key or settings.gemini_api_key):
    logger.warning(
        "Neither GEMINI_API_KEY nor OPENAI_API_KEY is set. "
        "Narrative requests will fail and fall back to static commentary."
    )
