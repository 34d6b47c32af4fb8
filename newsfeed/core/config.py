"""Application configuration."""

from typing import Literal

from pydantic import HttpUrl, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
        validate_default=True,
    )

    # Application
    PROJECT_NAME: str = "newsfeed"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    # Intranet backend
    NEWS_API_BASE_URL: HttpUrl = "http://localhost:5000/api"  # type: ignore[assignment]
    NEWS_API_TOKEN: str | None = None
    NEWS_QUERY_PATH: str = "/news"
    NEWS_PREFERENCES_PATH: str = "/users/news-preferences"

    # Feed
    NEWS_PAGE_SIZE: int = 10  # 每页条数（后端 limit 参数）
    NEWS_DEFAULT_LANGUAGE: str = "en"

    # HTTP
    HTTP_TIMEOUT_SEC: float = 15.0
    HTTP_USER_AGENT: str = "newsfeed/0.1"

    @computed_field
    @property
    def news_api_base(self) -> str:
        return str(self.NEWS_API_BASE_URL).rstrip("/")

    @computed_field
    @property
    def auth_headers(self) -> dict[str, str]:
        """Authorization header for the intranet API, empty when no token is set."""
        if not self.NEWS_API_TOKEN:
            return {}
        return {"Authorization": f"Bearer {self.NEWS_API_TOKEN}"}


settings = Settings()
