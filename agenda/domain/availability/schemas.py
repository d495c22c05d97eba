"""Availability domain schemas - Pydantic models for validation"""

from datetime import date

from pydantic import AliasChoices, BaseModel, Field


class DayHoursUpdate(BaseModel):
    """Replace the whole hour set of one professional on one day"""

    professional_id: int = Field(validation_alias=AliasChoices("professional_id", "professional"))
    date: date
    hours: list[str]


class AvailabilityEntryResponse(BaseModel):
    professional_id: int
    professional: str
    date: date
    hour: str


class DayHoursResponse(BaseModel):
    success: bool = True
    professional_id: int
    date: date
    hours: list[str]


class FreeSlotsResponse(BaseModel):
    professional_id: int
    date: date
    slots: list[str]
