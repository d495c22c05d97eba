"""Availability repository - Database operations for availability entries"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import AvailabilityEntry


class AvailabilityRepository:
    """Repository for availability database operations. Callers own the commit."""

    @staticmethod
    def replace_day_hours(
        db: Session, professional_id: int, day: date, hours: list[str]
    ) -> list[AvailabilityEntry]:
        """Delete every entry for (professional, day) and insert the given hours"""
        db.query(AvailabilityEntry).filter(
            AvailabilityEntry.professional_id == professional_id,
            AvailabilityEntry.date == day,
        ).delete(synchronize_session=False)

        entries = [
            AvailabilityEntry(professional_id=professional_id, date=day, hour=hour)
            for hour in hours
        ]
        db.add_all(entries)
        return entries

    @staticmethod
    def get_availability(
        db: Session, professional_id: Optional[int] = None, day: Optional[date] = None
    ) -> list[AvailabilityEntry]:
        """Entries ordered by professional, date, then hour label"""
        query = db.query(AvailabilityEntry).options(joinedload(AvailabilityEntry.professional))

        if professional_id is not None:
            query = query.filter(AvailabilityEntry.professional_id == professional_id)
        if day is not None:
            query = query.filter(AvailabilityEntry.date == day)

        return query.order_by(
            AvailabilityEntry.professional_id.asc(),
            AvailabilityEntry.date.asc(),
            AvailabilityEntry.hour.asc(),
        ).all()

    @staticmethod
    def get_day_hours(db: Session, professional_id: int, day: date) -> list[str]:
        rows = (
            db.query(AvailabilityEntry.hour)
            .filter(
                AvailabilityEntry.professional_id == professional_id,
                AvailabilityEntry.date == day,
            )
            .order_by(AvailabilityEntry.hour.asc())
            .all()
        )
        return [row.hour for row in rows]

    @staticmethod
    def remove_professional(db: Session, professional_id: int) -> int:
        """Delete all entries of a professional; zero rows is not an error"""
        return (
            db.query(AvailabilityEntry)
            .filter(AvailabilityEntry.professional_id == professional_id)
            .delete(synchronize_session=False)
        )
