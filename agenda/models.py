from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .config import DEFAULT_SESSION_MINUTES
from .database import Base


class Professional(Base):
    __tablename__ = "professionals"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)  # Display only, never used as a key
    bio = Column(Text, nullable=True)
    duration_minutes = Column(Integer, nullable=False, default=DEFAULT_SESSION_MINUTES)
    work_start = Column(String(5), nullable=True)  # "HH:MM"
    work_end = Column(String(5), nullable=True)  # "HH:MM"
    created_at = Column(DateTime, server_default=func.now())

    availability = relationship(
        "AvailabilityEntry",
        back_populates="professional",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    bookings = relationship(
        "Booking",
        back_populates="professional",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class AvailabilityEntry(Base):
    __tablename__ = "availability_entries"
    __table_args__ = (
        UniqueConstraint("professional_id", "date", "hour", name="uq_availability_slot"),
    )

    id = Column(Integer, primary_key=True, index=True)
    professional_id = Column(
        Integer, ForeignKey("professionals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date = Column(Date, nullable=False)
    hour = Column(String(20), nullable=False)  # Free-form label, usually "HH:MM"

    professional = relationship("Professional", back_populates="availability")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # Store-level backstop against double admission of the same start
        UniqueConstraint("professional_id", "start_at", name="uq_booking_professional_start"),
    )

    id = Column(Integer, primary_key=True, index=True)
    professional_id = Column(
        Integer, ForeignKey("professionals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    client_name = Column(String(255), nullable=False)
    client_rut = Column(String(20), nullable=False)
    client_phone = Column(String(20), nullable=False)
    client_email = Column(String(255), nullable=False)
    start_at = Column(DateTime, nullable=False, index=True)  # Naive clinic-local time
    end_at = Column(DateTime, nullable=False)
    meeting_link = Column(String(500), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    professional = relationship("Professional", back_populates="bookings")
    outbound_tasks = relationship(
        "OutboundTask",
        back_populates="booking",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OutboundTask.id",
    )


class OutboundTask(Base):
    """Side effect owed to a booking after it was persisted (meeting, notification)"""

    __tablename__ = "outbound_tasks"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    kind = Column(String(20), nullable=False)  # meeting, notification
    status = Column(String(20), nullable=False, default="pending")  # pending, running, done, failed
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    booking = relationship("Booking", back_populates="outbound_tasks")
