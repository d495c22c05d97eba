"""Staff router - login endpoint for the admin and professional views"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import LoginRequest, LoginResponse
from .service import StaffService

router = APIRouter(tags=["Staff"])


def get_staff_service(db: Session = Depends(get_db)) -> StaffService:
    """Dependency injection for StaffService"""
    return StaffService(db)


@router.post("/login", response_model=LoginResponse)
def login(data: LoginRequest, service: StaffService = Depends(get_staff_service)):
    result = service.login(data.name, data.password)
    if not result.success:
        return JSONResponse(status_code=401, content=result.model_dump())
    return result
