"""Professional router - FastAPI endpoints for professional operations"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import ProfessionalCreate, ProfessionalResponse, ProfessionalUpdate
from .service import ProfessionalService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/professionals", tags=["Professionals"])


def get_professional_service(db: Session = Depends(get_db)) -> ProfessionalService:
    """Dependency injection for ProfessionalService"""
    return ProfessionalService(db)


@router.get("", response_model=list[ProfessionalResponse])
def list_professionals(service: ProfessionalService = Depends(get_professional_service)):
    """List professionals ordered by name"""
    return service.list_professionals()


@router.get("/{professional_id}", response_model=ProfessionalResponse)
def get_professional(
    professional_id: int,
    service: ProfessionalService = Depends(get_professional_service),
):
    return service.get_professional(professional_id)


@router.post("", response_model=ProfessionalResponse, status_code=201)
def create_professional(
    data: ProfessionalCreate,
    service: ProfessionalService = Depends(get_professional_service),
):
    """Add a professional (admin)"""
    return service.create_professional(data)


@router.patch("/{professional_id}", response_model=ProfessionalResponse)
def update_professional(
    professional_id: int,
    data: ProfessionalUpdate,
    service: ProfessionalService = Depends(get_professional_service),
):
    """Update a professional (admin)"""
    return service.update_professional(professional_id, data)


@router.delete("/{professional_id}")
def delete_professional(
    professional_id: int,
    service: ProfessionalService = Depends(get_professional_service),
):
    """Delete a professional, cascading availability and bookings (admin)"""
    return service.delete_professional(professional_id)
