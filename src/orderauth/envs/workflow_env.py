from __future__ import annotations

import os
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator


class Settings(BaseModel):
    """Typed workflow settings built from environment variables."""

    ledger_base_url: str
    request_timeout: float = Field(15.0, gt=0)
    session_cookie: Optional[str] = None

    home_path: str = "/home"
    success_redirect_delay_ms: int = Field(5000, ge=0)
    reload_delay_ms: int = Field(500, ge=0)

    @field_validator("ledger_base_url")
    @classmethod
    def validate_ledger_base_url(cls, v: str) -> str:
        if not v:
            raise ValueError("Ledger base URL cannot be empty")
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"}:
            raise ValueError("Ledger base URL must start with http:// or https://")
        if not parsed.netloc:
            raise ValueError("Ledger base URL must include a host")
        return v

    @field_validator("session_cookie")
    @classmethod
    def validate_session_cookie(cls, v: Optional[str]) -> Optional[str]:
        if v and "=" not in v:
            raise ValueError("Session cookie must look like name=value")
        return v or None


def get_settings() -> Settings:
    """Return typed settings instance sourced from env vars."""
    ledger_base_url = os.environ.get("LEDGER_BASE_URL")
    if not ledger_base_url:
        raise ValueError("LEDGER_BASE_URL is required")
    return Settings(
        ledger_base_url=ledger_base_url,
        request_timeout=float(os.environ.get("LEDGER_TIMEOUT_SECONDS", "15")),
        session_cookie=os.environ.get("LEDGER_SESSION_COOKIE"),
        home_path=os.environ.get("WORKFLOW_HOME_PATH", "/home"),
        success_redirect_delay_ms=int(
            os.environ.get("WORKFLOW_SUCCESS_REDIRECT_DELAY_MS", "5000")
        ),
        reload_delay_ms=int(os.environ.get("WORKFLOW_RELOAD_DELAY_MS", "500")),
    )
