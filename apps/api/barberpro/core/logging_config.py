import logging
import sys

CONSOLE_FORMAT = "%(message)s"
SERVICE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO", console: bool = True) -> None:
    """Route BarberPro loggers to stdout.

    CLIs narrate each step as plain lines; the API keeps timestamps and logger names.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT if console else SERVICE_FORMAT))

    logger = logging.getLogger("barberpro")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
