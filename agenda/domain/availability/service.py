"""
Availability service

Availability store operations (replace a day's hours, query, remove) and the
slot resolver, which offers a professional's configured hours for a day minus
the hours already taken by bookings.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...database import commit_session
from ...errors import NotFoundError, ValidationError
from ...models import AvailabilityEntry
from ...shared.validators import normalize_hour_label, slot_key
from ..bookings.repository import BookingRepository
from ..professionals.repository import ProfessionalRepository
from .repository import AvailabilityRepository

logger = logging.getLogger(__name__)


def clean_hour_labels(hours: list[str]) -> list[str]:
    """Strip labels, drop blanks and drop repeats of the same clock time, keeping first-seen order"""
    cleaned = []
    seen = set()
    for hour in hours:
        label = (hour or "").strip()
        if not label:
            continue
        key = normalize_hour_label(label)
        if key in seen:
            continue
        seen.add(key)
        cleaned.append(label)
    return cleaned


class AvailabilityService:
    """Service layer for availability and free-slot resolution"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()

    def set_day_hours(self, professional_id: int, day: date, hours: list[str]) -> list[str]:
        """
        Replace the whole hour set for (professional, day).
        An empty list is a valid "no availability" state.
        """
        if not ProfessionalRepository.get_by_id(self.db, professional_id):
            raise NotFoundError(f"Professional {professional_id} not found")

        labels = clean_hour_labels(hours)
        self.repo.replace_day_hours(self.db, professional_id, day, labels)
        try:
            commit_session(self.db)
        except IntegrityError as e:
            raise ValidationError("Duplicate hours for this day", fields=["hours"]) from e

        logger.info(f"✅ Availability for professional {professional_id} on {day}: {labels}")
        return self.repo.get_day_hours(self.db, professional_id, day)

    def get_availability(
        self, professional_id: Optional[int] = None, day: Optional[date] = None
    ) -> list[AvailabilityEntry]:
        return self.repo.get_availability(self.db, professional_id, day)

    def remove_professional(self, professional_id: int) -> int:
        removed = self.repo.remove_professional(self.db, professional_id)
        commit_session(self.db)
        return removed

    def free_slots(self, professional_id: int, day: date) -> list[str]:
        """
        Configured hours for the day minus booked start times, in the
        configured order. Both sides are compared as (date, HH:MM) so a stored
        start of 09:00:00.000 still takes the "9:00" label.
        """
        hours = self.repo.get_day_hours(self.db, professional_id, day)
        if not hours:
            return []

        booked = {
            slot_key(start)
            for start in BookingRepository.list_starts_for_day(self.db, professional_id, day)
        }
        day_key = day.isoformat()

        return [hour for hour in hours if (day_key, normalize_hour_label(hour)) not in booked]
