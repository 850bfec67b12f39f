"""Plumbing shared by the console scripts."""

import logging
from typing import Callable

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from barberpro.core.config import Settings, get_settings
from barberpro.core.errors import BarberProError
from barberpro.core.logging_config import configure_logging
from barberpro.services.backend_client import BackendClient

logger = logging.getLogger("barberpro.cli")


def load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as e:
        missing = ", ".join(str(err["loc"][0]).upper() for err in e.errors())
        logger.error("❌ Invalid or missing environment variables: %s", missing)
        logger.error("💡 Check your .env file (see .env.example)")
        raise


def run(task: Callable[[BackendClient, Settings], bool], with_auth: bool = True) -> int:
    """Build the backend, run ``task`` and turn the outcome into an exit code."""
    configure_logging(console=True)
    backend = None
    try:
        settings = load_settings()
        configure_logging(settings.log_level, console=True)
        backend = BackendClient.from_settings(settings, with_auth=with_auth)
        return 0 if task(backend, settings) else 1
    except ValidationError:
        return 1
    except BarberProError as e:
        logger.error("\n❌ %s", e)
        return 1
    except SQLAlchemyError as e:
        logger.error("\n❌ Database error: %s", e)
        return 1
    finally:
        if backend is not None:
            backend.dispose()
