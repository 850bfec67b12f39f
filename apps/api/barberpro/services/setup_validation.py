"""End-to-end setup check: environment, connection, schema, seed data and test users."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError

from barberpro.core.config import Settings
from barberpro.core.errors import BarberProError, translate_db_error
from barberpro.models.profile import Profile
from barberpro.services.health_check import check_health
from barberpro.services.user_seeder import SEED_ACCOUNTS, SeedAccount

logger = logging.getLogger(__name__)


@dataclass
class SetupReport:
    passed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def check(self, name: str, ok: bool, detail: str = "") -> bool:
        if ok:
            self.passed.append(name)
            logger.info("   ✅ %s", name)
        else:
            self.failed.append(name)
            logger.info("   ❌ %s%s", name, f": {detail}" if detail else "")
        return ok


def check_environment(settings: Settings, report: SetupReport) -> None:
    logger.info("🔐 Environment")
    report.check("SUPABASE_URL", bool(settings.supabase_url))
    report.check("DATABASE_URL", bool(settings.database_url))
    report.check("SUPABASE_SERVICE_ROLE_KEY", bool(settings.supabase_service_role_key), "needed by the seed scripts")
    if not settings.supabase_anon_key:
        report.warnings.append("SUPABASE_ANON_KEY is not set; the login route cannot sign users in")
    if not settings.supabase_jwt_secret:
        report.warnings.append("SUPABASE_JWT_SECRET is not set; the dashboards cannot verify sessions")


def check_test_users(backend, accounts: List[SeedAccount], report: SetupReport) -> None:
    logger.info("\n👥 Test users")
    with backend.session() as db:
        try:
            profiles = {
                p.email: p
                for p in db.execute(select(Profile).where(Profile.email.in_([a.email for a in accounts]))).scalars()
            }
        except DBAPIError as e:
            raise translate_db_error(e) from e
    for account in accounts:
        profile = profiles.get(account.email)
        if profile is None:
            report.check(f"profile {account.email}", False, "missing, run barberpro-seed-users")
        else:
            report.check(
                f"profile {account.email}",
                profile.role == account.role,
                f"role is {profile.role.value}, expected {account.role.value}",
            )

    if backend.auth is None:
        report.warnings.append("Auth accounts not checked (no service role key)")
        return
    for account in accounts:
        report.check(f"auth user {account.email}", backend.auth.find_user_by_email(account.email) is not None)


def validate_setup(backend, settings: Settings, accounts: Optional[List[SeedAccount]] = None) -> SetupReport:
    accounts = SEED_ACCOUNTS if accounts is None else accounts
    report = SetupReport()

    logger.info("🧪 BARBERPRO - Setup validation\n")
    check_environment(settings, report)

    logger.info("\n🔗 Connection and schema")
    try:
        health = check_health(backend)
    except BarberProError as e:
        report.check("database connection", False, str(e))
        return report
    report.check("database connection", True)
    report.check("schema and default data", health.healthy, ", ".join(health.issues))

    if not health.missing_tables:
        try:
            check_test_users(backend, accounts, report)
        except BarberProError as e:
            report.check("test users", False, str(e))

    logger.info("\n" + "=" * 50)
    for warning in report.warnings:
        logger.info("⚠️  %s", warning)
    if report.ok:
        logger.info("🎉 SETUP IS VALID (%d checks passed)", len(report.passed))
    else:
        logger.info("❌ SETUP INCOMPLETE: %d check(s) failed", len(report.failed))
        for name in report.failed:
            logger.info("   • %s", name)
    return report
