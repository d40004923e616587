"""Command-line entrypoint: serve the PageSnap API with uvicorn."""

import uvicorn

from pagesnap.app import build_app
from pagesnap.config import Settings, get_settings
from pagesnap.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


def browser_mode(settings: Settings) -> str:
    """Human-readable acquisition mode. Never includes the token."""
    if settings.browserless_token:
        return f"remote ({settings.browserless_endpoint}) with local fallback"
    return "local Chromium only"


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)

    logger.info(f"Serving PageSnap on http://{settings.host}:{settings.port}, browser: {browser_mode(settings)}")

    uvicorn.run(
        build_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
