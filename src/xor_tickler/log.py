import logging
import sys

import structlog

VERBOSITY_LEVELS = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}


def level_for_verbosity(verbosity: int) -> int:
    return VERBOSITY_LEVELS.get(min(max(verbosity, 0), 2))


def configure_logging(verbosity: int = 0) -> None:
    """Send structlog output to stderr so stdout stays free for decrypted bytes."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_for_verbosity(verbosity)),
        # Looked up per logger so a swapped sys.stderr (tests, pipes) is honored.
        logger_factory=lambda *args: structlog.PrintLogger(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def configure_default_logging() -> None:
    """Use the quiet stderr setup unless the application configured structlog itself."""
    if not structlog.is_configured():
        configure_logging()
