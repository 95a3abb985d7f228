"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    DIGIMON_API_URL: str = "https://digimon-api.vercel.app/api/digimon"
    HTTP_TIMEOUT: float = 10.0
    FETCH_RETRIES: int = 3
    RETRY_BACKOFF: float = 1.0
    CACHE_TTL: int = 3600
    PLACEHOLDER_IMAGE_URL: str = "https://via.placeholder.com/300x300?text=No+Image"
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:8080"
    RATE_LIMIT: str = "100/minute"
    DEFAULT_LOCALE: str = "id"
    DEBUG: bool = False

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
