"""Exception taxonomy shared by the tooling and the API."""

from sqlalchemy.exc import DBAPIError, InterfaceError

ALREADY_EXISTS_MARKERS = ("already exists", "duplicate key")

CONNECTIVITY_MARKERS = (
    "could not connect",
    "connection refused",
    "connection to server",
    "server closed the connection",
    "could not translate host name",
    "timeout expired",
    "ssl syscall error",
)

MISSING_RELATION_MARKERS = ("no such table", "does not exist")


class BarberProError(Exception):
    """Base class for every error raised by BarberPro code."""


class ConfigurationError(BarberProError):
    pass


class BackendUnavailableError(BarberProError):
    """The backend could not be reached (network, refused connection, timeout)."""


class MissingDependencyError(BarberProError):
    """Something the run needs is not installed or not provisioned."""


class SqlExecutionError(BarberProError):
    pass


class AuthAdminError(BarberProError):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def is_already_exists(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in ALREADY_EXISTS_MARKERS)


def _driver_message(exc: DBAPIError) -> str:
    return str(exc.orig if exc.orig is not None else exc)


def is_connectivity_error(exc: DBAPIError) -> bool:
    if exc.connection_invalidated or isinstance(exc, InterfaceError):
        return True
    # SQLSTATE class 08: connection exception
    pgcode = getattr(exc.orig, "pgcode", None)
    if pgcode and pgcode.startswith("08"):
        return True
    message = _driver_message(exc).lower()
    return any(marker in message for marker in CONNECTIVITY_MARKERS)


def is_missing_relation(exc: DBAPIError) -> bool:
    pgcode = getattr(exc.orig, "pgcode", None)
    if pgcode:
        # undefined_table
        return pgcode == "42P01"
    message = _driver_message(exc).lower()
    return any(marker in message for marker in MISSING_RELATION_MARKERS)


def translate_db_error(exc: DBAPIError) -> BarberProError:
    """Map a SQLAlchemy DBAPI error onto the BarberPro taxonomy."""
    message = _driver_message(exc).strip()
    if is_connectivity_error(exc):
        return BackendUnavailableError(message)
    return SqlExecutionError(message)
