import enum
from sqlalchemy import Column, String, Boolean, DateTime, Enum, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from barberpro.core.database import Base

class UserRole(str, enum.Enum):
    admin = "admin"
    barber = "barber"
    customer = "customer"

class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the backend auth user
    id = Column(UUID(as_uuid=True), primary_key=True)

    email = Column(String, nullable=False, unique=True, index=True)
    full_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    role = Column(
        Enum(UserRole, name="user_role", native_enum=False, validate_strings=True),
        nullable=False,
        default=UserRole.customer,
    )

    barbershop_id = Column(
        UUID(as_uuid=True),
        ForeignKey("barbershops.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    avatar_url = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
