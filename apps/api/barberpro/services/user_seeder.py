"""Idempotent seeding of the test accounts and the rows that hang off them.

Every insert is preceded by a lookup on a natural key (email, name, day of
week, appointment slot), so running the seeder again converges to the same
end state.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import date, time as dtime, timedelta
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_fixed

from barberpro.core.config import get_settings
from barberpro.core.errors import BarberProError
from barberpro.models.appointment import Appointment, AppointmentStatus
from barberpro.models.barber import Barber
from barberpro.models.barbershop import Barbershop
from barberpro.models.profile import Profile, UserRole
from barberpro.models.service import Service
from barberpro.models.working_hours import WorkingHours
from barberpro.services.auth_admin import AuthUser, is_already_registered, is_transient_create_error
from barberpro.services.defaults import DEFAULT_BARBERSHOP_ID, WEEKLY_SCHEDULE, ensure_services

logger = logging.getLogger(__name__)


@dataclass
class SeedAccount:
    email: str
    password: str
    role: UserRole
    full_name: str
    barbershop_id: Optional[uuid.UUID] = None


SEED_ACCOUNTS = [
    SeedAccount("admin@barberpro.com", "admin123", UserRole.admin, "Administrador BarberPro", DEFAULT_BARBERSHOP_ID),
    SeedAccount("barber@barberpro.com", "barber123", UserRole.barber, "João Silva (Barbeiro)", DEFAULT_BARBERSHOP_ID),
    SeedAccount("cliente@barberpro.com", "client123", UserRole.customer, "Maria Santos (Cliente)", None),
]


@dataclass
class AccountResult:
    email: str
    user_id: Optional[uuid.UUID] = None
    user_created: bool = False
    profile_created: bool = False
    profile_fixed: bool = False
    barber_created: bool = False
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class SeedReport:
    created: int = 0
    existed: int = 0
    profile_created: int = 0
    profile_fixed: int = 0
    barbers_created: int = 0
    services_created: int = 0
    working_hours_created: int = 0
    appointments_created: int = 0
    profiles_verified: bool = False
    failed: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failed and self.profiles_verified


# ======================
# Auth accounts
# ======================

def create_auth_user(auth, account: SeedAccount, retry_delay: Optional[float] = None) -> AuthUser:
    """Create the auth account, retrying once on the backend's transient trigger failure."""
    if retry_delay is None:
        retry_delay = get_settings().auth_retry_delay_seconds

    def _log_retry(state):
        logger.info("   ⚠️  Database error creating %s, retrying...", account.email)

    for attempt in Retrying(
        stop=stop_after_attempt(2),
        wait=wait_fixed(retry_delay),
        retry=retry_if_exception(is_transient_create_error),
        before_sleep=_log_retry,
        reraise=True,
    ):
        with attempt:
            return auth.create_user(
                account.email,
                account.password,
                user_metadata={"full_name": account.full_name, "role": account.role.value},
            )


def ensure_auth_user(auth, account: SeedAccount, retry_delay: Optional[float] = None) -> tuple[AuthUser, bool]:
    """Return (user, created)."""
    user = auth.find_user_by_email(account.email)
    if user is not None:
        logger.info("   ⚠️  User already exists in Auth (ID: %s)", user.id)
        return user, False

    logger.info("   📝 Creating user in Auth...")
    try:
        user = create_auth_user(auth, account, retry_delay=retry_delay)
    except BarberProError as e:
        if not is_already_registered(e):
            raise
        logger.info("   ⚠️  %s already registered, looking it up again...", account.email)
        user = auth.find_user_by_email(account.email)
        if user is None:
            raise BarberProError(f"User exists in Auth but could not be found: {e}") from e
        return user, False

    logger.info("   ✅ User created in Auth (ID: %s)", user.id)
    return user, True


# ======================
# Rows
# ======================

def ensure_profile(db: Session, user_id: uuid.UUID, account: SeedAccount) -> tuple[bool, bool]:
    """Upsert the profile for an auth user. Returns (created, role_fixed)."""
    profile = db.get(Profile, user_id)
    if profile is None:
        db.add(
            Profile(
                id=user_id,
                email=account.email,
                full_name=account.full_name,
                role=account.role,
                barbershop_id=account.barbershop_id,
            )
        )
        try:
            db.commit()
            logger.info("   ✅ Profile created: %s (role: %s)", account.email, account.role.value)
            return True, False
        except IntegrityError:
            # The signup trigger may have inserted it in the meantime
            db.rollback()
            logger.info("   ⚠️  Profile for %s already exists", account.email)
            profile = db.get(Profile, user_id)
            if profile is None:
                raise

    if profile.role != account.role:
        logger.info("   🔄 Fixing profile role from %s to %s...", profile.role.value, account.role.value)
        profile.role = account.role
        profile.barbershop_id = account.barbershop_id
        db.commit()
        return False, True

    return False, False


def ensure_barber(db: Session, profile_id: uuid.UUID, barbershop_id: uuid.UUID) -> bool:
    """Create the barber row for a profile, or move it to ``barbershop_id``. Returns created."""
    barber = db.execute(select(Barber).where(Barber.profile_id == profile_id)).scalar_one_or_none()
    if barber is not None:
        if barber.barbershop_id != barbershop_id:
            barber.barbershop_id = barbershop_id
            db.commit()
            logger.info("   🔄 Barber moved to barbershop %s", barbershop_id)
        else:
            logger.info("   ⚠️  Barber record already exists for this profile")
        return False

    db.add(Barber(profile_id=profile_id, barbershop_id=barbershop_id))
    db.commit()
    logger.info("   ✅ Barber record created")
    return True


def ensure_working_hours(db: Session, barber_id: uuid.UUID) -> int:
    existing = set(
        db.execute(select(WorkingHours.day_of_week).where(WorkingHours.barber_id == barber_id)).scalars().all()
    )
    created = 0
    for day, (start, end, break_start, break_end, available) in WEEKLY_SCHEDULE.items():
        if day in existing:
            continue
        db.add(
            WorkingHours(
                barber_id=barber_id,
                day_of_week=day,
                start_time=start,
                end_time=end,
                break_start=break_start,
                break_end=break_end,
                is_available=available,
            )
        )
        created += 1
    if created:
        db.commit()
    return created


def process_account(backend, db: Session, account: SeedAccount, retry_delay: Optional[float] = None) -> AccountResult:
    result = AccountResult(email=account.email)
    logger.info("\n🔄 Processing user: %s", account.email)
    try:
        user, result.user_created = ensure_auth_user(backend.require_auth(), account, retry_delay=retry_delay)
        result.user_id = uuid.UUID(str(user.id))

        logger.info("   📝 Checking profile...")
        result.profile_created, result.profile_fixed = ensure_profile(db, result.user_id, account)

        if account.role == UserRole.barber and account.barbershop_id:
            logger.info("   📝 Checking barber record...")
            result.barber_created = ensure_barber(db, result.user_id, account.barbershop_id)
    except (BarberProError, SQLAlchemyError) as e:
        db.rollback()
        result.error = str(e)
        logger.error("❌ Error processing user %s: %s", account.email, e)
    return result


def seed_barber_catalogue(db: Session, report: SeedReport) -> None:
    """Give every barber the default services on their barbershop and a weekly schedule."""
    barbers = db.execute(select(Barber)).scalars().all()
    logger.info("\n💈 Checking services and working hours for %d barber(s)...", len(barbers))
    for barber in barbers:
        report.services_created += ensure_services(db, barber.barbershop_id)
        created = ensure_working_hours(db, barber.id)
        report.working_hours_created += created
        if created:
            logger.info("   ✅ %d working-hours rows created for barber %s", created, barber.id)


def verify_profiles(db: Session, accounts: List[SeedAccount]) -> bool:
    logger.info("\n🔍 Verifying created profiles...")
    emails = [a.email for a in accounts]
    profiles = db.execute(select(Profile).where(Profile.email.in_(emails))).scalars().all()

    logger.info("\n📋 Profiles found:")
    by_email = {}
    for p in profiles:
        by_email[p.email] = p
        shop = f" (barbershop: {str(p.barbershop_id)[:8]}...)" if p.barbershop_id else ""
        logger.info("   • %s - %s - %s%s", p.email, p.role.value, p.full_name, shop)

    return all(a.email in by_email and by_email[a.email].role == a.role for a in accounts)


def create_sample_appointments(db: Session, accounts: List[SeedAccount], today: Optional[date] = None) -> int:
    logger.info("\n🗓️  Creating sample appointments...")
    today = today or date.today()

    customer_emails = [a.email for a in accounts if a.role == UserRole.customer]
    customer = db.execute(
        select(Profile).where(Profile.role == UserRole.customer, Profile.email.in_(customer_emails))
    ).scalars().first()
    barber = db.execute(select(Barber).order_by(Barber.created_at, Barber.id)).scalars().first()
    if customer is None or barber is None:
        logger.info("⚠️  Customer or barber not found")
        return 0

    services = db.execute(
        select(Service).where(Service.barbershop_id == barber.barbershop_id).order_by(Service.name).limit(3)
    ).scalars().all()
    if not services or db.get(Barbershop, barber.barbershop_id) is None:
        logger.info("⚠️  Not enough data to create appointments")
        return 0

    second = services[1] if len(services) > 1 else services[0]
    samples = [
        (services[0], today + timedelta(days=1), dtime(10, 0), AppointmentStatus.scheduled,
         "Test appointment created automatically"),
        (second, today + timedelta(days=2), dtime(14, 30), AppointmentStatus.confirmed,
         "Second test appointment"),
    ]

    created = 0
    for service, day, slot, status, notes in samples:
        exists = db.execute(
            select(Appointment.id).where(
                Appointment.customer_id == customer.id,
                Appointment.barber_id == barber.id,
                Appointment.appointment_date == day,
                Appointment.appointment_time == slot,
            )
        ).first()
        if exists:
            continue
        db.add(
            Appointment(
                customer_id=customer.id,
                barber_id=barber.id,
                service_id=service.id,
                barbershop_id=barber.barbershop_id,
                appointment_date=day,
                appointment_time=slot,
                status=status,
                total_price=service.price,
                notes=notes,
            )
        )
        created += 1

    if created:
        db.commit()
    logger.info("✅ %d sample appointment(s) created", created)
    return created


def seed_users(
    backend,
    accounts: Optional[List[SeedAccount]] = None,
    pause: Optional[float] = None,
    retry_delay: Optional[float] = None,
    today: Optional[date] = None,
) -> SeedReport:
    accounts = SEED_ACCOUNTS if accounts is None else accounts
    if pause is None:
        pause = get_settings().seed_pause_seconds

    logger.info("🚀 BARBERPRO - Automatic user and profile seed\n")
    logger.info("📋 Idempotent run: everything is checked before it is created\n")

    report = SeedReport()
    with backend.session() as db:
        for i, account in enumerate(accounts):
            result = process_account(backend, db, account, retry_delay=retry_delay)
            if result.success:
                if result.user_created:
                    report.created += 1
                else:
                    report.existed += 1
                report.profile_created += int(result.profile_created)
                report.profile_fixed += int(result.profile_fixed)
                report.barbers_created += int(result.barber_created)
            else:
                report.failed.append(account.email)

            if pause and i < len(accounts) - 1:
                time.sleep(pause)

        logger.info("\n📊 Processing summary:")
        logger.info("   • Users created in Auth: %d", report.created)
        logger.info("   • Users already present: %d", report.existed)
        logger.info("   • Profiles created: %d", report.profile_created)
        logger.info("   • Profiles fixed: %d", report.profile_fixed)
        logger.info("   • Processed: %d/%d", report.created + report.existed, len(accounts))

        try:
            seed_barber_catalogue(db, report)
            report.profiles_verified = verify_profiles(db, accounts)
            if report.profiles_verified:
                logger.info("\n✅ All users and profiles are in sync!")
                report.appointments_created = create_sample_appointments(db, accounts, today=today)
            else:
                logger.info("\n⚠️  Some profiles may not be in sync.")
                logger.info("💡 Run the script again or check the log above.")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("❌ Error seeding dependent records: %s", e)
            report.failed.append("dependent-records")

    return report
