"""
Application configuration using Pydantic Settings
"""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """
    # Database
    DATABASE_URL: str = "sqlite:///./subtrack.db"

    # Application
    DEBUG: bool = False
    CURRENCY_SYMBOL: str = "₹"

    # LLM provider (OpenAI-compatible chat completions)
    GROQ_API_KEY: str = ""
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    GROQ_MODEL: str = "llama-3.1-8b-instant"

    # Optional prompt compression
    SCALEDOWN_API_KEY: str = ""
    SCALEDOWN_BASE_URL: str = "https://api.scaledown.xyz"

    AI_TIMEOUT_SECONDS: float = 15.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    def get_sqlalchemy_url(self) -> str:
        """
        Convert DATABASE_URL to SQLAlchemy format (postgresql+psycopg://)
        """
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+psycopg://", 1)
        return url

    @property
    def ai_enabled(self) -> bool:
        return bool(self.GROQ_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance (singleton)
    """
    return Settings()
