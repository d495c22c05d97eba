"""Professional domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import HOUR_PATTERN


def _validate_clock(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not HOUR_PATTERN.match(v):
        raise ValueError("Time must be formatted as HH:MM")
    return v


class ProfessionalCreate(BaseModel):
    """Schema for adding a professional (admin)"""

    name: str
    bio: Optional[str] = None
    duration_minutes: Optional[int] = None
    work_start: Optional[str] = None
    work_end: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Duration must be greater than 0")
        return v

    @field_validator("work_start", "work_end")
    @classmethod
    def validate_work_hours(cls, v):
        return _validate_clock(v)


class ProfessionalUpdate(BaseModel):
    """Schema for updating a professional (admin)"""

    name: Optional[str] = None
    bio: Optional[str] = None
    duration_minutes: Optional[int] = None
    work_start: Optional[str] = None
    work_end: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Name cannot be empty")
        return v

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Duration must be greater than 0")
        return v

    @field_validator("work_start", "work_end")
    @classmethod
    def validate_work_hours(cls, v):
        return _validate_clock(v)


class ProfessionalResponse(BaseModel):
    id: int
    name: str
    bio: Optional[str] = None
    duration_minutes: int
    work_start: Optional[str] = None
    work_end: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
