"""
Logging configuration for Barcard.
"""
import logging
import sys

from barcard.config import Settings

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def setup_logger(settings: Settings):
    """Configure root logging and the barcard package level."""

    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # basicConfig is a no-op once uvicorn has configured the root logger
    logging.getLogger("barcard").setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"[CARD] Logging at {settings.LOG_LEVEL} (env={settings.ENV})")
