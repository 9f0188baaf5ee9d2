"""
Configuration settings for the Client Q&A Bot.

This module defines the application settings using Pydantic Settings with
support for environment variables and `.env` files. Settings are read once at
startup; the answer pipeline only ever sees the frozen `AssistantConfig`
derived from them.
"""

from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Values shipped in sample .env files; treated the same as a missing key.
PLACEHOLDER_API_KEYS = {
    "your-gemini-api-key-here",
    "your-api-key-here",
    "changeme",
}


class ModelSettings(BaseSettings):
    """Generative model configuration."""

    api_key: Optional[SecretStr] = Field(default=None, description="Model provider API key")
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai/",
        description="OpenAI-compatible endpoint of the model provider",
    )
    name: str = Field(default="gemini-1.5-flash", description="Model name")
    timeout_ms: int = Field(default=3000, gt=0, description="Hard timeout for one model call")
    token_optimization: bool = Field(default=True, description="Send the compact client projection")
    force_free_tier: bool = Field(default=False, description="Never call the model")
    temperature: float = Field(default=0.1, description="Temperature for completions")
    max_tokens: int = Field(default=512, description="Maximum tokens for completions")

    model_config = SettingsConfigDict(env_prefix="MODEL_", env_file=".env", extra="ignore")


class DatabaseSettings(BaseSettings):
    """SQLite access store configuration."""

    path: str = Field(default="clientqa.sqlite", description="SQLite database file (':memory:' allowed)")
    seed_sample_data: bool = Field(default=True, description="Insert the demo dataset on first start")

    model_config = SettingsConfigDict(env_prefix="DATABASE_", env_file=".env", extra="ignore")


class TelemetrySettings(BaseSettings):
    """Logging configuration."""

    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(env_prefix="TELEMETRY_", env_file=".env", extra="ignore")


class ApplicationSettings(BaseSettings):
    """Main application settings."""

    # Application metadata
    app_name: str = Field(default="Client Q&A Bot", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    environment: str = Field(default="development", description="Environment (development, staging, production)")

    # API configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=3001, description="API port")
    api_prefix: str = Field(default="/api", description="API prefix")
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"], description="CORS origins")

    # Service configurations
    model: ModelSettings = Field(default_factory=ModelSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=(),
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


class AssistantConfig(BaseModel):
    """
    Immutable answer-path configuration.

    Built once at startup and handed to the orchestrator by reference, so no
    helper below it reads environment state.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_api_key: Optional[SecretStr] = None
    model_name: str = "gemini-1.5-flash"
    base_url: Optional[str] = None
    timeout_ms: int = 3000
    token_optimization: bool = True
    force_free_tier: bool = False
    temperature: float = 0.1
    max_tokens: int = 512

    @property
    def has_api_key(self) -> bool:
        if self.model_api_key is None:
            return False
        key = self.model_api_key.get_secret_value().strip()
        return bool(key) and key not in PLACEHOLDER_API_KEYS

    @property
    def free_tier(self) -> bool:
        """True when every answer must come from the heuristic engine."""
        return self.force_free_tier or not self.has_api_key

    @property
    def mode_label(self) -> str:
        if self.force_free_tier:
            return "Free Tier (Heuristic Engine)"
        if self.has_api_key:
            return f"Model Enabled ({self.model_name})"
        return "Heuristic Engine Only"

    @classmethod
    def from_settings(cls, model_settings: ModelSettings) -> "AssistantConfig":
        return cls(
            model_api_key=model_settings.api_key,
            model_name=model_settings.name,
            base_url=model_settings.base_url,
            timeout_ms=model_settings.timeout_ms,
            token_optimization=model_settings.token_optimization,
            force_free_tier=model_settings.force_free_tier,
            temperature=model_settings.temperature,
            max_tokens=model_settings.max_tokens,
        )


# Global settings instance
settings = ApplicationSettings()
