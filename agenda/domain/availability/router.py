"""Availability router - FastAPI endpoints for availability and free slots"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import (
    AvailabilityEntryResponse,
    DayHoursResponse,
    DayHoursUpdate,
    FreeSlotsResponse,
)
from .service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["Availability"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


@router.get("", response_model=list[AvailabilityEntryResponse])
def get_availability(
    professional_id: Optional[int] = Query(None),
    day: Optional[date] = Query(None, alias="date"),
    service: AvailabilityService = Depends(get_availability_service),
):
    """All (professional, date, hour) entries; omitted filters mean all"""
    entries = service.get_availability(professional_id, day)
    return [
        AvailabilityEntryResponse(
            professional_id=e.professional_id,
            professional=e.professional.name,
            date=e.date,
            hour=e.hour,
        )
        for e in entries
    ]


@router.post("", response_model=DayHoursResponse)
def set_day_hours(
    data: DayHoursUpdate,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Replace the hour set of one professional on one day (admin)"""
    hours = service.set_day_hours(data.professional_id, data.date, data.hours)
    return DayHoursResponse(professional_id=data.professional_id, date=data.date, hours=hours)


@router.get("/free", response_model=FreeSlotsResponse)
def get_free_slots(
    professional_id: int = Query(...),
    day: date = Query(..., alias="date"),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Hours still bookable for a professional on a day"""
    return FreeSlotsResponse(
        professional_id=professional_id,
        date=day,
        slots=service.free_slots(professional_id, day),
    )
