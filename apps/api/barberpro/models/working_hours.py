import uuid
from sqlalchemy import Column, Time, SmallInteger, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from barberpro.core.database import Base

class WorkingHours(Base):
    __tablename__ = "working_hours"
    __table_args__ = (
        UniqueConstraint("barber_id", "day_of_week", name="uq_working_hours_barber_day"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    barber_id = Column(
        UUID(as_uuid=True),
        ForeignKey("barbers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    day_of_week = Column(SmallInteger, nullable=False)  # 0=Sun ... 6=Sat
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    break_start = Column(Time, nullable=True)
    break_end = Column(Time, nullable=True)

    is_available = Column(Boolean, nullable=False, default=True)
