"""Booking repository - Database operations for bookings"""

from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import not_, or_
from sqlalchemy.orm import Session, joinedload

from ...database import commit_session
from ...models import Booking


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def list_all(
        db: Session,
        professional_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Booking]:
        """Bookings ordered by start time; start/end bound start_at as [start, end)"""
        query = db.query(Booking).options(joinedload(Booking.professional))

        if professional_id is not None:
            query = query.filter(Booking.professional_id == professional_id)
        if start is not None:
            query = query.filter(Booking.start_at >= start)
        if end is not None:
            query = query.filter(Booking.start_at < end)

        return query.order_by(Booking.start_at.asc(), Booking.id.asc()).all()

    @staticmethod
    def get_by_id(db: Session, booking_id: int) -> Optional[Booking]:
        return (
            db.query(Booking)
            .options(joinedload(Booking.professional))
            .filter(Booking.id == booking_id)
            .first()
        )

    @staticmethod
    def insert(db: Session, **booking_data) -> Booking:
        """Stage a new booking and assign its id; the caller commits. No conflict check here."""
        booking = Booking(**booking_data)
        db.add(booking)
        db.flush()
        return booking

    @staticmethod
    def find_overlapping(
        db: Session, professional_id: int, start: datetime, end: datetime
    ) -> list[Booking]:
        """
        Bookings of the professional intersecting [start, end).
        Half-open: [a1,a2) and [b1,b2) overlap iff NOT (a2 <= b1 OR a1 >= b2),
        so back-to-back sessions do not conflict.
        """
        return (
            db.query(Booking)
            .filter(
                Booking.professional_id == professional_id,
                not_(or_(Booking.end_at <= start, Booking.start_at >= end)),
            )
            .order_by(Booking.start_at.asc())
            .all()
        )

    @staticmethod
    def list_starts_for_day(db: Session, professional_id: int, day: date) -> list[datetime]:
        day_start = datetime.combine(day, time.min)
        rows = (
            db.query(Booking.start_at)
            .filter(
                Booking.professional_id == professional_id,
                Booking.start_at >= day_start,
                Booking.start_at < day_start + timedelta(days=1),
            )
            .order_by(Booking.start_at.asc())
            .all()
        )
        return [row.start_at for row in rows]

    @staticmethod
    def delete_by_id(db: Session, booking_id: int) -> int:
        """Delete a booking; returns rows affected (0 when it did not exist)"""
        deleted = db.query(Booking).filter(Booking.id == booking_id).delete(synchronize_session=False)
        commit_session(db)
        return deleted

    @staticmethod
    def delete_for_professional(db: Session, professional_id: int) -> int:
        """Stage deletion of every booking of a professional; the caller commits"""
        return (
            db.query(Booking)
            .filter(Booking.professional_id == professional_id)
            .delete(synchronize_session=False)
        )

    @staticmethod
    def attach_meeting_link(db: Session, booking_id: int, meeting_link: str) -> bool:
        """Best-effort link update; False when the booking no longer exists"""
        updated = (
            db.query(Booking)
            .filter(Booking.id == booking_id)
            .update({Booking.meeting_link: meeting_link}, synchronize_session=False)
        )
        commit_session(db)
        return updated > 0
