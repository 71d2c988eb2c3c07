from pathlib import Path
from typing import Literal

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

STATIC_FILES_CACHE_PROFILE = "static_files"

_PACKAGE_STATIC_DIR = Path(__file__).parent / "static"


class CacheProfile(BaseModel):
    """Cache-Control policy applied to a group of responses."""

    model_config = {"frozen": True}

    duration: int = 0  # max-age in seconds
    location: Literal["any", "client", "none"] = "any"
    no_store: bool = False
    vary_by_header: str | None = None


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Pydantic Settings automatically reads env vars matching field names (case-insensitive).
    In development, it also reads from .env file if present.
    In production, set environment variables directly (Docker, k8s, etc.).
    """

    # "development" turns on diagnostic mode: unexpected errors carry the full
    # exception text in the problem "detail" field. Never use it in production.
    environment: Literal["development", "production"] = "production"

    # Shown as the Swagger UI document title and the OpenAPI title
    project_name: str = "API Template"
    version: str = "1.0.0"

    # Render Starlette's HTML traceback page instead of problem+json for unexpected errors
    developer_error_pages: bool = False

    # Directory served at "/" with cache headers; None disables static files
    static_dir: Path | None = _PACKAGE_STATIC_DIR

    # Named cache profiles. Complex values are read from env as JSON, e.g.
    # CACHE_PROFILES='{"static_files": {"duration": 3600, "location": "client"}}'
    cache_profiles: dict[str, CacheProfile] = {
        STATIC_FILES_CACHE_PROFILE: CacheProfile(duration=31536000, location="any"),
    }

    # Request framing limits (bytes / count), checked before routing
    max_request_line_size: int = 8192
    max_request_header_count: int = 100
    max_request_headers_total_size: int = 32768

    model_config = SettingsConfigDict(
        env_file=".env",  # Load from .env in development
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


settings = Settings()
