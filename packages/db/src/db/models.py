# This project was developed with assistance from AI tools.
"""
Signal1 -- domain models

Mirror of the Supabase ``public`` schema: one profile per auth identity,
a role-specific row for lenders and brokers, uploaded file metadata and
admin notes. ``profiles.id`` references ``auth.users.id``; that foreign key
lives in the migration because ``auth`` is owned by Supabase.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import relationship

from .database import Base
from .enums import SubscriptionTier, UserRole

_UUID = postgresql.UUID(as_uuid=False)


class Profile(Base):
    """Common identity data, keyed by the auth user id."""

    __tablename__ = "profiles"

    id = Column(_UUID, primary_key=True)
    full_name = Column(String(255), nullable=True)
    role = Column(
        Enum(UserRole, name="user_role", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    country = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    lender = relationship("Lender", back_populates="profile", uselist=False, passive_deletes=True)
    broker = relationship("Broker", back_populates="profile", uselist=False, passive_deletes=True)


class Lender(Base):
    __tablename__ = "lenders"

    id = Column(_UUID, ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    company_name = Column(String(255), nullable=True)
    specialization = Column(String(255), nullable=True)
    criteria_summary = Column(Text, nullable=True)
    contact_info = Column(Text, nullable=True)
    guideline_file_url = Column(Text, nullable=True)
    profile_completed = Column(Boolean, server_default="false", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    profile = relationship("Profile", back_populates="lender")
    files = relationship("LenderFile", back_populates="lender", passive_deletes=True)


class Broker(Base):
    __tablename__ = "brokers"

    id = Column(_UUID, ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    agency_name = Column(String(255), nullable=True)
    client_notes = Column(Text, nullable=True)
    subscription_tier = Column(
        Enum(
            SubscriptionTier,
            name="subscription_tier",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        server_default=SubscriptionTier.FREE.value,
        nullable=False,
    )
    profile_completed = Column(Boolean, server_default="false", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    profile = relationship("Profile", back_populates="broker")
    files = relationship("BrokerFile", back_populates="broker", passive_deletes=True)


class LenderFile(Base):
    """Metadata for an object in the ``lender_files`` bucket."""

    __tablename__ = "lender_files"

    id = Column(_UUID, primary_key=True, server_default=func.gen_random_uuid())
    lender_id = Column(
        _UUID, ForeignKey("lenders.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    file_name = Column(String(255), nullable=True)
    file_url_path = Column(Text, nullable=False)
    file_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)
    extracted_summary = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    lender = relationship("Lender", back_populates="files")


class BrokerFile(Base):
    """Metadata for an object in the ``broker_files`` bucket."""

    __tablename__ = "broker_files"

    id = Column(_UUID, primary_key=True, server_default=func.gen_random_uuid())
    broker_id = Column(
        _UUID, ForeignKey("brokers.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    file_name = Column(String(255), nullable=True)
    file_url_path = Column(Text, nullable=False)
    file_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)
    extracted_summary = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    broker = relationship("Broker", back_populates="files")


class AdminNote(Base):
    """Note written by an admin about (and visible to) a user."""

    __tablename__ = "admin_notes"

    id = Column(_UUID, primary_key=True, server_default=func.gen_random_uuid())
    user_id = Column(
        _UUID, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    created_by = Column(
        _UUID, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    note = Column(Text, nullable=False)
    read = Column(Boolean, server_default="false", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


# Role-specific row per role; admin has none.
ROLE_PROFILE_MODELS: dict[UserRole, type[Base] | None] = {
    UserRole.LENDER: Lender,
    UserRole.BROKER: Broker,
    UserRole.ADMIN: None,
}
