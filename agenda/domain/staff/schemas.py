"""Staff domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class LoginRequest(BaseModel):
    name: str = Field(validation_alias=AliasChoices("name", "username", "user"))
    password: str = Field(validation_alias=AliasChoices("password", "pass"))


class LoginResponse(BaseModel):
    success: bool
    role: Optional[str] = None  # admin, professional
    professional_id: Optional[int] = None
