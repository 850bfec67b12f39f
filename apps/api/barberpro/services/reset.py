import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy import delete
from sqlalchemy.exc import DBAPIError

from barberpro.core.errors import BarberProError, ConfigurationError, translate_db_error
from barberpro.models.appointment import Appointment
from barberpro.models.barber import Barber
from barberpro.models.barbershop import Barbershop
from barberpro.models.profile import Profile
from barberpro.models.service import Service
from barberpro.models.working_hours import WorkingHours
from barberpro.services.user_seeder import SEED_ACCOUNTS, SeedAccount

logger = logging.getLogger(__name__)

# Children first so foreign keys never block a delete
RESET_ORDER = [Appointment, WorkingHours, Barber, Service, Profile, Barbershop]


@dataclass
class ResetReport:
    rows_deleted: Dict[str, int] = field(default_factory=dict)
    users_deleted: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.errors


def reset_database(backend, confirm: bool = False, accounts: Optional[List[SeedAccount]] = None) -> ResetReport:
    """Wipe application rows and the seeded auth users."""
    if not confirm:
        raise ConfigurationError("Refusing to reset without confirmation. Re-run with --confirm.")

    accounts = SEED_ACCOUNTS if accounts is None else accounts
    report = ResetReport()

    logger.info("🗑️  BARBERPRO - Database reset\n")
    logger.info("📋 Clearing tables...")
    with backend.session() as db:
        try:
            for model in RESET_ORDER:
                deleted = db.execute(delete(model)).rowcount
                report.rows_deleted[model.__tablename__] = deleted
                logger.info("   ✅ %s: %d row(s) deleted", model.__tablename__, deleted)
            db.commit()
        except DBAPIError as e:
            db.rollback()
            raise translate_db_error(e) from e

    if backend.auth is None:
        logger.info("\n⚠️  No auth admin client, seeded auth users were kept")
        return report

    logger.info("\n👤 Deleting seeded auth users...")
    for account in accounts:
        try:
            user = backend.auth.find_user_by_email(account.email)
            if user is None:
                logger.info("   ⏭️  %s not found", account.email)
                continue
            backend.auth.delete_user(user.id)
            report.users_deleted.append(account.email)
            logger.info("   ✅ %s deleted", account.email)
        except BarberProError as e:
            logger.error("   ❌ Could not delete %s: %s", account.email, e)
            report.errors.append(f"{account.email}: {e}")

    return report
