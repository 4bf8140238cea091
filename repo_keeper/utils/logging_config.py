"""structlog setup for the repo-keeper CLI.

Library code only calls ``structlog.get_logger``; the CLI (or whatever job
runner embeds the connector) calls configure_logging once at startup.
"""

import logging

import structlog

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Route log events to stdout, one rendered line per event.

    Args:
        log_level: Minimum level name, case-insensitive
        json_output: Render JSON lines; otherwise use the console renderer
    """
    level = log_level.upper()
    if level not in LOG_LEVELS:
        level = "INFO"

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
