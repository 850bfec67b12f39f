import logging
import re
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, sessionmaker

from barberpro.core.config import Settings, get_settings
from barberpro.core.errors import (
    ConfigurationError,
    MissingDependencyError,
    is_missing_relation,
    translate_db_error,
)
from barberpro.services.auth_admin import AuthAdminClient

logger = logging.getLogger(__name__)

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class BackendClient:
    """Authenticated handle to the hosted backend.

    Rows and raw SQL go through the project's Postgres connection; user
    management goes through the auth admin API.
    """

    def __init__(self, engine, auth: Optional[AuthAdminClient] = None):
        self.engine = engine
        self.auth = auth
        self.session_factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, with_auth: bool = True) -> "BackendClient":
        settings = settings or get_settings()
        if with_auth and not settings.supabase_service_role_key:
            raise ConfigurationError(
                "SUPABASE_SERVICE_ROLE_KEY is not set. Administrative scripts need the service role key (check your .env)."
            )
        logger.debug("Connecting to %s", settings.masked_database_url)
        try:
            engine = create_engine(settings.database_url, pool_pre_ping=True)
        except ModuleNotFoundError as e:
            raise MissingDependencyError(
                f"Database driver not installed ({e.name}). Run: pip install psycopg2-binary"
            ) from e
        auth = AuthAdminClient.from_settings(settings) if with_auth else None
        return cls(engine, auth)

    def session(self) -> Session:
        return self.session_factory()

    def require_auth(self) -> AuthAdminClient:
        if self.auth is None:
            raise ConfigurationError("This operation needs the auth admin API (service role key).")
        return self.auth

    def probe_table(self, table_name: str) -> bool:
        """Bounded read against a table; False only when the table does not exist."""
        if not IDENTIFIER.match(table_name):
            raise ValueError(f"Invalid table name: {table_name!r}")
        try:
            with self.engine.connect() as conn:
                conn.execute(text(f"SELECT 1 FROM {table_name} LIMIT 1"))
        except DBAPIError as e:
            if is_missing_relation(e) and not e.connection_invalidated:
                return False
            raise translate_db_error(e) from e
        return True

    def exec_sql(self, statement: str) -> None:
        """Run one arbitrary statement in its own transaction."""
        try:
            with self.engine.begin() as conn:
                conn.exec_driver_sql(statement, execution_options={"no_parameters": True})
        except DBAPIError as e:
            raise translate_db_error(e) from e

    def dispose(self) -> None:
        self.engine.dispose()
