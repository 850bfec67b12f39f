import enum
import uuid
from sqlalchemy import Column, Date, Time, Text, DateTime, Enum, Numeric, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from barberpro.core.database import Base

class AppointmentStatus(str, enum.Enum):
    pending = "pending"
    scheduled = "scheduled"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    customer_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    barber_id = Column(UUID(as_uuid=True), ForeignKey("barbers.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(UUID(as_uuid=True), ForeignKey("services.id", ondelete="SET NULL"), nullable=True)
    barbershop_id = Column(UUID(as_uuid=True), ForeignKey("barbershops.id", ondelete="CASCADE"), nullable=False, index=True)

    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(Time, nullable=False)

    status = Column(
        Enum(AppointmentStatus, name="appointment_status", native_enum=False, validate_strings=True),
        nullable=False,
        default=AppointmentStatus.pending,
    )

    total_price = Column(Numeric(10, 2), nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
