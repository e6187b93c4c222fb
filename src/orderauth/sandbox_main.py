from __future__ import annotations

import logging

import uvicorn

from .envs.sandbox_env import get_settings

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point for the sandbox ledger application."""
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()

    logger.info("Starting %s sandbox ledger v%s", settings.app_name, settings.app_version)
    logger.info(
        "Ledger API will be available at: http://%s:%s/api/v1",
        settings.api_host,
        settings.api_port,
    )

    uvicorn.run(
        "orderauth.api.ledger_api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
        log_level="info",
    )


if __name__ == "__main__":
    main()
