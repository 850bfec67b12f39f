import pytest
from sqlalchemy import delete, func, select

from barberpro.core.errors import BackendUnavailableError
from barberpro.models.barbershop import Barbershop
from barberpro.models.service import Service
from barberpro.services.defaults import DEFAULT_BARBERSHOP_ID
from barberpro.services.health_check import (
    MISSING_DEFAULT_BARBERSHOP,
    MISSING_DEFAULT_SERVICES,
    check_health,
    run_health_check,
    validate_pre_seed,
)
from conftest import sqlite_setup_sql

pytestmark = pytest.mark.unit


class UnreachableBackend:
    def probe_table(self, table_name):
        raise BackendUnavailableError("could not connect to server: Connection refused")


def test_complete_database_is_healthy(backend, defaults):
    report = check_health(backend)

    assert report.healthy
    assert report.issues == []


def test_missing_services_table_is_the_only_issue(backend, engine, defaults):
    Service.__table__.drop(engine)

    report = check_health(backend)

    assert report.issues == ["missing_table_services"]


def test_missing_default_barbershop_reports_services_too(backend):
    report = check_health(backend)

    assert report.issues == [MISSING_DEFAULT_BARBERSHOP, MISSING_DEFAULT_SERVICES]


def test_too_few_default_services(backend, db, defaults):
    db.execute(delete(Service).where(Service.name == "Corte + Barba"))
    db.commit()

    report = check_health(backend)

    assert report.issues == [MISSING_DEFAULT_SERVICES]


def test_connectivity_failure_is_not_reported_as_missing_tables():
    with pytest.raises(BackendUnavailableError):
        check_health(UnreachableBackend())


def test_probe_table_rejects_odd_names(backend):
    with pytest.raises(ValueError):
        backend.probe_table("profiles; DROP TABLE profiles")


def test_fix_creates_default_rows(backend, db):
    assert run_health_check(backend, auto_fix=True) is True

    assert db.get(Barbershop, DEFAULT_BARBERSHOP_ID) is not None
    count = db.execute(
        select(func.count()).select_from(Service).where(Service.barbershop_id == DEFAULT_BARBERSHOP_ID)
    ).scalar_one()
    assert count == 3


def test_fix_runs_migration_for_missing_tables(empty_backend, empty_engine):
    sql = sqlite_setup_sql(empty_engine, with_defaults=False)

    assert run_health_check(empty_backend, auto_fix=True, sql_text=sql) is True
    assert check_health(empty_backend).healthy


def test_check_without_fix_fails(empty_backend):
    assert run_health_check(empty_backend) is False


def test_pre_seed_validation_prepares_empty_database(empty_backend, empty_engine):
    sql = sqlite_setup_sql(empty_engine, with_defaults=False)

    assert validate_pre_seed(empty_backend, sql_text=sql) is True
    assert check_health(empty_backend).healthy


def test_failed_migration_skips_default_rows(empty_backend):
    assert run_health_check(empty_backend, auto_fix=True, sql_text="CREATE TABLE broken (;") is False

    assert empty_backend.probe_table("barbershops") is False


def test_pre_seed_stops_when_migration_fails(empty_backend):
    assert validate_pre_seed(empty_backend, sql_text="CREATE TABLE broken (;") is False
