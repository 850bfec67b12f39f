import logging
import os
import uuid

# Settings are read at import time by barberpro.main
os.environ.update(
    {
        "SUPABASE_URL": "https://example.supabase.co",
        "SUPABASE_ANON_KEY": "anon-key",
        "SUPABASE_SERVICE_ROLE_KEY": "service-role-key",
        "SUPABASE_JWT_SECRET": "test-jwt-secret",
        "DATABASE_URL": "sqlite://",
        "MIGRATION_PAUSE_SECONDS": "0",
        "SEED_PAUSE_SECONDS": "0",
        "AUTH_RETRY_DELAY_SECONDS": "0",
        "FIX_SETTLE_SECONDS": "0",
    }
)

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.schema import CreateTable

from barberpro.core.database import Base
from barberpro.core.errors import AuthAdminError
from barberpro.models import appointment, barber, barbershop, profile, service, working_hours  # noqa: F401
from barberpro.services.auth_admin import AuthUser
from barberpro.services.backend_client import BackendClient
from barberpro.services.defaults import DEFAULT_BARBERSHOP_ID, create_default_barbershop, ensure_services

# SQLite stores UUIDs as 32 hex chars
DEFAULT_SHOP_HEX = DEFAULT_BARBERSHOP_ID.hex


def make_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def sqlite_setup_sql(engine, with_defaults: bool = True) -> str:
    """The setup script, rendered for SQLite."""
    parts = ["-- schema"]
    for table in Base.metadata.sorted_tables:
        parts.append(str(CreateTable(table).compile(dialect=engine.dialect)).strip() + ";")
    if with_defaults:
        parts.append("-- default data")
        parts.append(
            "INSERT INTO barbershops (id, name, theme_color, is_active) "
            f"VALUES ('{DEFAULT_SHOP_HEX}', 'BarberPro - Barbearia Premium', '#FFD700', 1);"
        )
        for name, price, minutes in (
            ("Corte Masculino", "35.00", 30),
            ("Barba Completa", "25.00", 20),
            ("Corte + Barba", "55.00", 45),
        ):
            parts.append(
                "INSERT INTO services (id, barbershop_id, name, price, duration_minutes, is_active) "
                f"VALUES ('{uuid.uuid4().hex}', '{DEFAULT_SHOP_HEX}', '{name}', {price}, {minutes}, 1);"
            )
    return "\n\n".join(parts) + "\n"


class FakeAuthAdmin:
    """In-memory stand-in for the auth admin API."""

    def __init__(self):
        self.users = {}
        self.create_calls = []
        self.create_failures = []
        self.deleted = []

    def add_user(self, email, user_id=None):
        user = AuthUser(id=str(user_id or uuid.uuid4()), email=email.lower())
        self.users[user.email] = user
        return user

    def iter_users(self, email_filter=None):
        return iter(list(self.users.values()))

    def find_user_by_email(self, email):
        return self.users.get(email.lower())

    def create_user(self, email, password, user_metadata=None):
        self.create_calls.append(email)
        if self.create_failures:
            raise self.create_failures.pop(0)
        if email.lower() in self.users:
            raise AuthAdminError(422, "A user with this email address has already been registered")
        user = self.add_user(email)
        user.user_metadata = user_metadata or {}
        return user

    def delete_user(self, user_id):
        for email, user in list(self.users.items()):
            if user.id == str(user_id):
                del self.users[email]
                self.deleted.append(email)


@pytest.fixture(autouse=True)
def reset_barberpro_logger():
    yield
    logger = logging.getLogger("barberpro")
    logger.handlers.clear()
    logger.propagate = True


@pytest.fixture
def engine():
    engine = make_engine()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def empty_engine():
    engine = make_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def auth():
    return FakeAuthAdmin()


@pytest.fixture
def backend(engine, auth):
    return BackendClient(engine, auth=auth)


@pytest.fixture
def empty_backend(empty_engine, auth):
    return BackendClient(empty_engine, auth=auth)


@pytest.fixture
def db(backend):
    session = backend.session()
    yield session
    session.close()


@pytest.fixture
def defaults(db):
    create_default_barbershop(db)
    ensure_services(db, DEFAULT_BARBERSHOP_ID)
