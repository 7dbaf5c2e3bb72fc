"""Application configuration using Pydantic Settings."""

import os
from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# NOTE: logfire.configure() is not called here. Logfire is configured once at
# application startup (main.py via observability/logfire_config.py) or in the
# pytest hooks (conftest.py).


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every external credential has a safe default so the reply pipeline can
    start in degraded mode (fallback embeddings, disconnected knowledge store)
    when a service is not configured.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    environment: str = Field(default="development", description="Environment: development, staging, production")
    debug: bool = Field(default=False, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3001, description="Server port")

    # CORS Settings
    allowed_origins: str = Field(
        default="http://localhost:3000, http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    # Vector store database (Postgres with the pgvector extension)
    db_user: str = Field(default="postgres", description="Database user")
    db_password: str = Field(default="postgres", description="Database password")
    db_host: str = Field(default="localhost", description="Database host")
    db_port: int = Field(default=5432, description="Database port")
    db_name: str = Field(default="onebox", description="Database name")

    # External APIs
    openai_api_key: str = Field(default="", description="OpenAI API key (chat + embeddings)")

    # Models
    llm_model: str = Field(default="gpt-3.5-turbo", description="Chat model used for intent and replies")
    embedding_model: str = Field(default="text-embedding-ada-002", description="Embedding model")
    embedding_dimensions: int = Field(default=1536, description="Embedding vector dimension")

    # Reply template variables
    meeting_link: str = Field(default="https://cal.com/example", description="Link substituted for {{meeting_link}}")
    product_name: str = Field(default="OneBox-AI", description="Name substituted for {{product_name}}")

    # Pipeline
    pipeline_timeout_seconds: float = Field(default=30.0, description="Wall-clock limit per suggestion request")

    # Embedding rate limiting
    embedding_initial_delay_ms: float = Field(default=1000.0, description="Starting inter-request delay")
    embedding_max_delay_ms: float = Field(default=30000.0, description="Backoff ceiling")
    embedding_max_retries: int = Field(default=3, description="Attempts per embedding on rate limit")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Observability
    logfire_token: str = Field(default="", description="Logfire observability token")

    @field_validator("allowed_origins")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("embedding_dimensions")
    @classmethod
    def validate_embedding_dimensions(cls, v: int) -> int:
        """Embedding dimension must be positive."""
        if v <= 0:
            raise ValueError("embedding_dimensions must be a positive integer")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() == "production"

    @property
    def database_url(self) -> str:
        """Construct the SQLAlchemy database URL for the vector store."""
        return (
            f"postgresql+psycopg2://{self.db_user}:{self.db_password}@"
            f"{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def llm_model_id(self) -> str:
        """Model identifier in pydantic-ai's provider:model form."""
        return f"openai:{self.llm_model}"


# Create a singleton instance
settings = Settings()

# Ensure SDKs that read OPENAI_API_KEY at import time see the configured value.
if settings.openai_api_key:
    os.environ.setdefault("OPENAI_API_KEY", settings.openai_api_key)


def get_settings() -> "Settings":
    """Return the singleton settings instance."""
    return settings
