from __future__ import annotations

import os

from pydantic import BaseModel


class Settings(BaseModel):
    """Typed sandbox ledger settings built from environment variables."""

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    api_debug: bool = False
    api_cors_origins: list[str] = ["*"]

    # Application settings
    app_name: str = "OrderAuth"
    app_version: str = "1.0.0"


def get_settings() -> Settings:
    """Return typed settings instance sourced from env vars."""
    return Settings(
        api_host=os.environ.get("SANDBOX_API_HOST", "0.0.0.0"),
        api_port=int(os.environ.get("SANDBOX_API_PORT", "8080")),
        api_debug=os.environ.get("SANDBOX_API_DEBUG", "false").lower() == "true",
        api_cors_origins=os.environ.get("SANDBOX_API_CORS_ORIGINS", "*").split(","),
        app_name=os.environ.get("APP_NAME", "OrderAuth"),
        app_version=os.environ.get("APP_VERSION", "1.0.0"),
    )
