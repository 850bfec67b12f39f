import logging
import uuid
from datetime import time
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from barberpro.models.barbershop import Barbershop
from barberpro.models.service import Service

logger = logging.getLogger(__name__)

# Must match the id seeded by auto_setup_complete.sql
DEFAULT_BARBERSHOP_ID = uuid.UUID("550e8400-e29b-41d4-a716-446655440000")

DEFAULT_BARBERSHOP = {
    "name": "BarberPro - Barbearia Premium",
    "address": "Rua das Flores, 123 - Centro",
    "phone": "(11) 99999-9999",
    "email": "contato@barberpro.com",
}

DEFAULT_SERVICES = [
    {"name": "Corte Masculino", "description": "Corte moderno e estiloso", "price": Decimal("35.00"), "duration_minutes": 30},
    {"name": "Barba Completa", "description": "Aparar e modelar barba", "price": Decimal("25.00"), "duration_minutes": 20},
    {"name": "Corte + Barba", "description": "Pacote completo", "price": Decimal("55.00"), "duration_minutes": 45},
]

MIN_DEFAULT_SERVICES = 3

# day_of_week -> (start, end, break_start, break_end, is_available); 0=Sun ... 6=Sat
WEEKLY_SCHEDULE = {
    0: (time(9, 0), time(18, 0), None, None, False),
    1: (time(9, 0), time(18, 0), time(12, 0), time(13, 0), True),
    2: (time(9, 0), time(18, 0), time(12, 0), time(13, 0), True),
    3: (time(9, 0), time(18, 0), time(12, 0), time(13, 0), True),
    4: (time(9, 0), time(18, 0), time(12, 0), time(13, 0), True),
    5: (time(9, 0), time(18, 0), time(12, 0), time(13, 0), True),
    6: (time(9, 0), time(14, 0), None, None, True),
}


def create_default_barbershop(db: Session) -> bool:
    """Insert the default barbershop. Returns False when it was already there."""
    if db.get(Barbershop, DEFAULT_BARBERSHOP_ID) is not None:
        return False
    db.add(Barbershop(id=DEFAULT_BARBERSHOP_ID, **DEFAULT_BARBERSHOP))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return False
    return True


def ensure_services(db: Session, barbershop_id: uuid.UUID) -> int:
    """Add the default catalogue to a barbershop, skipping names it already has."""
    existing = set(
        db.execute(select(Service.name).where(Service.barbershop_id == barbershop_id)).scalars().all()
    )
    created = 0
    for item in DEFAULT_SERVICES:
        if item["name"] in existing:
            continue
        db.add(Service(barbershop_id=barbershop_id, **item))
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning("   ⚠️  Service %s not created: %s", item["name"], e.orig)
            continue
        created += 1
        logger.info("   ✅ Service created: %s", item["name"])
    return created
