"""Booking domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class BookingRequest(BaseModel):
    """
    Client booking request.

    Every field is optional at the schema level so that missing and malformed
    values are reported together by the admission step, field by field.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    rut: Optional[str] = None
    phone: Optional[str] = None
    professional_id: Optional[int] = Field(
        None, validation_alias=AliasChoices("professional_id", "professional")
    )
    start: Optional[str] = Field(None, validation_alias=AliasChoices("datetime", "start"))


class BookingResponse(BaseModel):
    id: int
    professional_id: int
    professional: Optional[str] = None
    name: str
    rut: str
    phone: str
    email: str
    datetime: datetime
    end: datetime
    meet_link: Optional[str] = None
    created_at: Optional[datetime] = None


class BookingCreatedResponse(BaseModel):
    success: bool = True
    booking: BookingResponse
    meetingLink: Optional[str] = None


class DeleteBookingResponse(BaseModel):
    success: bool = True
    deleted: int
