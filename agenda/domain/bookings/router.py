"""Booking router - FastAPI endpoints for booking operations"""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Booking
from ...services.dispatcher import OutboundDispatcher, schedule_delivery
from .schemas import (
    BookingCreatedResponse,
    BookingRequest,
    BookingResponse,
    DeleteBookingResponse,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


def get_dispatcher(request: Request) -> Optional[OutboundDispatcher]:
    return getattr(request.app.state, "outbound_dispatcher", None)


def booking_to_response(booking: Booking) -> BookingResponse:
    return BookingResponse(
        id=booking.id,
        professional_id=booking.professional_id,
        professional=booking.professional.name if booking.professional else None,
        name=booking.client_name,
        rut=booking.client_rut,
        phone=booking.client_phone,
        email=booking.client_email,
        datetime=booking.start_at,
        end=booking.end_at,
        meet_link=booking.meeting_link,
        created_at=booking.created_at,
    )


@router.get("", response_model=list[BookingResponse])
def list_bookings(
    professional_id: Optional[int] = Query(None),
    day: Optional[date] = Query(None, alias="date"),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    service: BookingService = Depends(get_booking_service),
):
    """Bookings ordered by start time (admin and professional views)"""
    bookings = service.list_bookings(professional_id=professional_id, day=day, start=start, end=end)
    return [booking_to_response(b) for b in bookings]


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    service: BookingService = Depends(get_booking_service),
):
    return booking_to_response(service.get_booking(booking_id))


@router.post("", response_model=BookingCreatedResponse, status_code=201)
def create_booking(
    data: BookingRequest,
    background_tasks: BackgroundTasks,
    service: BookingService = Depends(get_booking_service),
    dispatcher: Optional[OutboundDispatcher] = Depends(get_dispatcher),
):
    """
    Admit a booking.

    The response is sent as soon as the booking is stored; the meeting link
    and the confirmation email follow in the background, so meetingLink is
    always null here. Clients read it later from GET /bookings/{id}.
    """
    booking = service.admit_booking(data)
    schedule_delivery(background_tasks, dispatcher, booking.id)
    return BookingCreatedResponse(booking=booking_to_response(booking), meetingLink=booking.meeting_link)


@router.delete("/{booking_id}", response_model=DeleteBookingResponse)
def delete_booking(
    booking_id: int,
    service: BookingService = Depends(get_booking_service),
):
    """Delete a booking; deleting an unknown id still succeeds"""
    return DeleteBookingResponse(deleted=service.delete_booking(booking_id))
