"""structlog setup for the API process."""

import logging

import structlog

from qr_api.config import Settings

NOISY_LIBRARIES = ("uvicorn.access", "opentelemetry")


def configure_logging(settings: Settings) -> None:
    """Configure structlog rendering and level filtering.

    Args:
        settings: Application settings (log_level, log_json)
    """
    level = getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(level=level, format="%(message)s")
    for lib in NOISY_LIBRARIES:
        logging.getLogger(lib).setLevel(max(level, logging.WARNING))

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
