"""Database health check and remediation.

Probes the required tables and the default seed rows, reports missing items as
stable issue ids, and can repair them by running the bundled migration and
inserting the default barbershop/services.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError

from barberpro.core.config import get_settings
from barberpro.core.errors import translate_db_error
from barberpro.models.barbershop import Barbershop
from barberpro.models.service import Service
from barberpro.services.defaults import (
    DEFAULT_BARBERSHOP_ID,
    MIN_DEFAULT_SERVICES,
    create_default_barbershop,
    ensure_services,
)
from barberpro.services.migrator import apply_migration, load_migration_sql, log_summary

logger = logging.getLogger(__name__)

REQUIRED_TABLES = [
    "barbershops",
    "profiles",
    "barbers",
    "services",
    "appointments",
    "working_hours",
]

MISSING_TABLE_PREFIX = "missing_table_"
MISSING_DEFAULT_BARBERSHOP = "missing_default_barbershop"
MISSING_DEFAULT_SERVICES = "missing_default_services"


@dataclass
class HealthReport:
    issues: List[str] = field(default_factory=list)

    @property
    def healthy(self) -> bool:
        return not self.issues

    @property
    def missing_tables(self) -> List[str]:
        return [i[len(MISSING_TABLE_PREFIX):] for i in self.issues if i.startswith(MISSING_TABLE_PREFIX)]


def check_table_exists(backend, table_name: str) -> bool:
    return backend.probe_table(table_name)


def check_default_barbershop(backend) -> bool:
    with backend.session() as db:
        try:
            return db.get(Barbershop, DEFAULT_BARBERSHOP_ID) is not None
        except DBAPIError as e:
            raise translate_db_error(e) from e


def count_default_services(backend) -> int:
    with backend.session() as db:
        try:
            return db.execute(
                select(func.count()).select_from(Service).where(Service.barbershop_id == DEFAULT_BARBERSHOP_ID)
            ).scalar_one()
        except DBAPIError as e:
            raise translate_db_error(e) from e


def check_health(backend) -> HealthReport:
    """Probe tables and seed rows. Read-only.

    Raises BackendUnavailableError when the database cannot be reached, so a
    network blip is never reported as missing tables.
    """
    report = HealthReport()
    present = set()

    logger.info("📋 Checking required tables...")
    for table in REQUIRED_TABLES:
        if check_table_exists(backend, table):
            logger.info("   ✅ Table '%s' exists", table)
            present.add(table)
        else:
            logger.info("   ❌ Table '%s' not found", table)
            report.issues.append(f"{MISSING_TABLE_PREFIX}{table}")

    logger.info("\n🏪 Checking default barbershop...")
    barbershop_ok = "barbershops" in present and check_default_barbershop(backend)
    if barbershop_ok:
        logger.info("   ✅ Default barbershop exists")
    else:
        logger.info("   ❌ Default barbershop not found")
        report.issues.append(MISSING_DEFAULT_BARBERSHOP)

    logger.info("\n🛠️  Checking default services...")
    if not barbershop_ok:
        # Services hang off the default barbershop
        logger.info("   ❌ No default barbershop to hold services")
        report.issues.append(MISSING_DEFAULT_SERVICES)
    elif "services" not in present:
        logger.info("   ⏭️  Skipped: services table is missing")
    else:
        count = count_default_services(backend)
        if count >= MIN_DEFAULT_SERVICES:
            logger.info("   ✅ %d default services found", count)
        else:
            logger.info("   ❌ Not enough default services (%d/%d)", count, MIN_DEFAULT_SERVICES)
            report.issues.append(MISSING_DEFAULT_SERVICES)

    return report


def fix_issues(backend, issues: List[str], sql_text: Optional[str] = None, settle: Optional[float] = None) -> bool:
    """Repair what check_health reported. Returns False if any repair failed."""
    if settle is None:
        settle = get_settings().fix_settle_seconds
    ok = True

    if any(i.startswith(MISSING_TABLE_PREFIX) for i in issues):
        logger.info("🔧 Running auto_setup_complete.sql...")
        result = apply_migration(backend, sql_text if sql_text is not None else load_migration_sql())
        log_summary(result)
        ok = result.succeeded
        if not ok:
            # Seed rows need the tables the migration failed to create
            logger.error("❌ Migration failed, default data not created")
            return False
        if settle:
            time.sleep(settle)

    try:
        if MISSING_DEFAULT_BARBERSHOP in issues:
            logger.info("🏪 Creating default barbershop...")
            with backend.session() as db:
                if create_default_barbershop(db):
                    logger.info("   ✅ Default barbershop created")
                else:
                    logger.info("   ⚠️  Default barbershop already existed")

        if MISSING_DEFAULT_BARBERSHOP in issues or MISSING_DEFAULT_SERVICES in issues:
            logger.info("🛠️  Creating default services...")
            with backend.session() as db:
                created = ensure_services(db, DEFAULT_BARBERSHOP_ID)
            logger.info("   ✅ %d default services created", created)
    except DBAPIError as e:
        raise translate_db_error(e) from e

    return ok


def log_report(report: HealthReport) -> None:
    logger.info("\n" + "=" * 50)
    if report.healthy:
        logger.info("🎉 HEALTH CHECK PASSED! Database is complete")
        logger.info("✅ All tables and essential data are present")
    else:
        logger.info("⚠️  HEALTH CHECK FAILED! Issues found:")
        for issue in report.issues:
            logger.info("   • %s", issue)
        logger.info("\n💡 Run with --fix to repair automatically")


def run_health_check(backend, auto_fix: bool = False, sql_text: Optional[str] = None) -> bool:
    logger.info("🏥 BARBERPRO - Database Health Check\n")
    report = check_health(backend)

    if not report.healthy and auto_fix:
        logger.info("\n🔧 Applying automatic fixes...")
        if not fix_issues(backend, report.issues, sql_text=sql_text):
            log_report(check_health(backend))
            return False
        logger.info("\n🔄 Running the check again...")
        return run_health_check(backend, auto_fix=False)

    log_report(report)
    return report.healthy


def validate_pre_seed(backend, sql_text: Optional[str] = None) -> bool:
    """Full validation before seeding: migrate if needed, then guarantee shop and services."""
    logger.info("🔍 PRE-SEED VALIDATION\n")

    report = check_health(backend)
    if not report.healthy:
        logger.info("⚠️  Issues found, running auto-migrate...")
        result = apply_migration(backend, sql_text if sql_text is not None else load_migration_sql())
        log_summary(result)
        if not result.succeeded:
            logger.error("❌ Automatic migration failed")
            return False

        remaining = check_health(backend)
        if not remaining.healthy:
            logger.info("⚠️  Some issues remain, fixing them directly...")
            if not fix_issues(backend, remaining.issues, sql_text=sql_text):
                return False

    logger.info("\n🔍 Checking essential seed data...")
    with backend.session() as db:
        try:
            if db.execute(select(Barbershop.id).limit(1)).first() is None:
                logger.info("   ⚠️  No barbershop found, creating the default one...")
                create_default_barbershop(db)
            else:
                logger.info("   ✅ A barbershop exists")

            if db.execute(select(Service.id).limit(1)).first() is None:
                logger.info("   ⚠️  No service found, creating the default catalogue...")
                ensure_services(db, DEFAULT_BARBERSHOP_ID)
            else:
                logger.info("   ✅ Services exist")
        except DBAPIError as e:
            raise translate_db_error(e) from e

    logger.info("\n🎉 PRE-SEED VALIDATION COMPLETE!")
    logger.info("✅ Database ready for user seeding")
    return True
