"""
Booking service - booking store access and booking admission

Admission turns a request into a durable booking:
validate -> compute end -> check overlap -> persist (with its outbound tasks).
The overlap check and the insert run under a per-professional critical
section; meeting creation and the confirmation email happen afterwards from
the outbound queue and can never undo a persisted booking.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import CLINIC_TIMEZONE, DEFAULT_SESSION_MINUTES
from ...database import commit_session
from ...errors import ConflictError, NotFoundError, StorageError, ValidationError
from ...models import Booking
from ...services.outbound import OUTBOUND_TASK_KINDS, OutboundRepository
from ...shared.validators import is_valid_email, is_valid_phone, is_valid_rut, normalize_rut
from ..professionals.repository import ProfessionalRepository
from .repository import BookingRepository
from .schemas import BookingRequest

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "rut", "phone", "email", "professional", "datetime")

# Column widths of the bookings table
FIELD_MAX_LENGTHS = {"name": 255, "rut": 20, "phone": 20, "email": 255}

_professional_locks: dict[int, threading.Lock] = {}
_professional_locks_guard = threading.Lock()


def professional_lock(professional_id: int) -> threading.Lock:
    """In-process mutex serialising admission for one professional"""
    with _professional_locks_guard:
        lock = _professional_locks.get(professional_id)
        if lock is None:
            lock = threading.Lock()
            _professional_locks[professional_id] = lock
        return lock


def parse_start_time(value: str) -> datetime:
    """
    Parse an ISO start time ("2024-06-10T09:00", "...T09:00:00", "...Z", "...-03:00").
    Aware values are converted to the clinic zone; the result is naive clinic time.
    """
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(ZoneInfo(CLINIC_TIMEZONE)).replace(tzinfo=None)
    return parsed


SLOT_CONSTRAINT = "uq_booking_professional_start"


def is_slot_conflict(error: IntegrityError) -> bool:
    """PostgreSQL names the violated constraint; SQLite lists the columns"""
    message = str(error.orig).lower()
    if SLOT_CONSTRAINT in message:
        return True
    return "unique" in message and "bookings.start_at" in message


def is_foreign_key_violation(error: IntegrityError) -> bool:
    return "foreign key" in str(error.orig).lower()


@dataclass
class ValidBookingRequest:
    name: str
    rut: str
    phone: str
    email: str
    professional_id: int
    start: datetime


def validate_booking_request(request: BookingRequest) -> ValidBookingRequest:
    """Presence, format and length checks; reports every offending field at once"""
    values = {
        "name": (request.name or "").strip(),
        "rut": (request.rut or "").strip(),
        "phone": (request.phone or "").strip(),
        "email": (request.email or "").strip(),
        "professional": request.professional_id,
        "datetime": (request.start or "").strip(),
    }

    missing = [field for field in REQUIRED_FIELDS if values[field] in (None, "")]
    invalid = [
        field
        for field, limit in FIELD_MAX_LENGTHS.items()
        if values[field] and len(values[field]) > limit
    ]

    if values["rut"] and "rut" not in invalid and not is_valid_rut(values["rut"]):
        invalid.append("rut")
    if values["email"] and "email" not in invalid and not is_valid_email(values["email"]):
        invalid.append("email")
    if values["phone"] and "phone" not in invalid and not is_valid_phone(values["phone"]):
        invalid.append("phone")

    start = None
    if values["datetime"]:
        try:
            start = parse_start_time(values["datetime"])
        except ValueError:
            invalid.append("datetime")

    if missing or invalid:
        parts = []
        if missing:
            parts.append(f"missing required fields: {', '.join(missing)}")
        if invalid:
            parts.append(f"invalid fields: {', '.join(invalid)}")
        raise ValidationError("Invalid booking request - " + "; ".join(parts), fields=missing + invalid)

    return ValidBookingRequest(
        name=values["name"],
        rut=normalize_rut(values["rut"]),
        phone=values["phone"],
        email=values["email"].lower(),
        professional_id=values["professional"],
        start=start,
    )


class BookingService:
    """Service layer for bookings"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()

    def list_bookings(
        self,
        professional_id: Optional[int] = None,
        day: Optional[date] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Booking]:
        """Bookings ordered by start time, optionally for one professional and/or date range"""
        if day is not None:
            start = datetime.combine(day, time.min)
            end = start + timedelta(days=1)
        return self.repo.list_all(self.db, professional_id, start, end)

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.repo.get_by_id(self.db, booking_id)
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def delete_booking(self, booking_id: int) -> int:
        """Idempotent delete: an unknown id reports zero rows and is still a success"""
        deleted = self.repo.delete_by_id(self.db, booking_id)
        if deleted:
            logger.info(f"🗑️ Booking {booking_id} deleted")
        else:
            logger.info(f"ℹ️ Booking {booking_id} already absent, nothing to delete")
        return deleted

    def admit_booking(self, request: BookingRequest) -> Booking:
        """
        Validate, conflict-check and persist a booking.

        Raises ValidationError, NotFoundError (unknown professional),
        ConflictError (slot occupied) or StorageError. On success the booking
        and its pending outbound tasks are committed together.
        """
        try:
            valid = validate_booking_request(request)
        except ValidationError as e:
            logger.warning(f"⚠️ Booking rejected, invalid fields: {e.fields}")
            raise

        professional = ProfessionalRepository.get_by_id(self.db, valid.professional_id)
        if not professional:
            raise NotFoundError(f"Professional {valid.professional_id} not found")

        duration = professional.duration_minutes or DEFAULT_SESSION_MINUTES
        end = valid.start + timedelta(minutes=duration)

        with professional_lock(valid.professional_id):
            try:
                # Row lock serialises admission across processes on PostgreSQL
                if not ProfessionalRepository.lock_by_id(self.db, valid.professional_id):
                    self.db.rollback()
                    raise NotFoundError(f"Professional {valid.professional_id} not found")

                if self.repo.find_overlapping(self.db, valid.professional_id, valid.start, end):
                    self.db.rollback()
                    logger.warning(
                        f"⚠️ Slot occupied for professional {valid.professional_id} "
                        f"at {valid.start.isoformat()}"
                    )
                    raise ConflictError("Slot occupied")

                booking = self.repo.insert(
                    self.db,
                    professional_id=valid.professional_id,
                    client_name=valid.name,
                    client_rut=valid.rut,
                    client_phone=valid.phone,
                    client_email=valid.email,
                    start_at=valid.start,
                    end_at=end,
                )
                OutboundRepository.enqueue(self.db, booking.id, OUTBOUND_TASK_KINDS)
                commit_session(self.db)
            except IntegrityError as e:
                self.db.rollback()
                if is_slot_conflict(e):
                    logger.warning(
                        f"⚠️ Slot occupied (constraint) for professional {valid.professional_id} "
                        f"at {valid.start.isoformat()}"
                    )
                    raise ConflictError("Slot occupied") from e
                if is_foreign_key_violation(e):
                    logger.warning(f"⚠️ Professional {valid.professional_id} removed during admission")
                    raise NotFoundError(f"Professional {valid.professional_id} not found") from e
                logger.error(f"❌ Booking insert rejected by the database: {e.orig}")
                raise StorageError("Could not store the booking") from e

        self.db.refresh(booking)
        logger.info(
            f"✅ Booking {booking.id} admitted: professional {booking.professional_id}, "
            f"{booking.start_at.isoformat()} - {booking.end_at.isoformat()}"
        )
        return booking
