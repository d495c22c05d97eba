"""Half-open overlap query against the booking store."""
from datetime import datetime, timedelta

import pytest

from agenda.domain.bookings.repository import BookingRepository
from agenda.models import Booking


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 6, 10, hour, minute)


@pytest.fixture
def session_at_nine(db, make_professional):
    """One professional with a 09:00-09:30 booking"""
    ana = make_professional()
    db.add(
        Booking(
            professional_id=ana.id,
            client_name="Camila Soto",
            client_rut="7520873-1",
            client_phone="+56912345678",
            client_email="camila.soto@example.cl",
            start_at=at(9),
            end_at=at(9) + timedelta(minutes=30),
        )
    )
    db.commit()
    return ana


class TestFindOverlapping:
    def test_back_to_back_sessions_do_not_overlap(self, db, session_at_nine):
        assert BookingRepository.find_overlapping(db, session_at_nine.id, at(9, 30), at(10)) == []
        assert BookingRepository.find_overlapping(db, session_at_nine.id, at(8, 30), at(9)) == []

    def test_partial_overlap(self, db, session_at_nine):
        assert len(BookingRepository.find_overlapping(db, session_at_nine.id, at(9, 15), at(9, 45))) == 1
        assert len(BookingRepository.find_overlapping(db, session_at_nine.id, at(8, 45), at(9, 15))) == 1

    def test_containment_and_identity(self, db, session_at_nine):
        assert len(BookingRepository.find_overlapping(db, session_at_nine.id, at(8), at(11))) == 1
        assert len(BookingRepository.find_overlapping(db, session_at_nine.id, at(9, 10), at(9, 20))) == 1
        assert len(BookingRepository.find_overlapping(db, session_at_nine.id, at(9), at(9, 30))) == 1

    def test_other_professionals_are_ignored(self, db, session_at_nine, make_professional):
        maria = make_professional("Dra. María Gómez")
        assert BookingRepository.find_overlapping(db, maria.id, at(9), at(9, 30)) == []
