"""Professional service - Business logic for professional operations"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import DEFAULT_SESSION_MINUTES
from ...database import commit_session
from ...errors import ConflictError, NotFoundError, ValidationError
from ...models import Professional
from ..availability.repository import AvailabilityRepository
from ..bookings.repository import BookingRepository
from .repository import ProfessionalRepository
from .schemas import ProfessionalCreate, ProfessionalUpdate

logger = logging.getLogger(__name__)

NON_NULLABLE_FIELDS = ("name", "duration_minutes")

DEMO_PROFESSIONALS = [
    {
        "name": "Dra. Ana Pérez",
        "bio": "Psicóloga clínica, terapia cognitivo-conductual",
        "duration_minutes": 50,
        "work_start": "09:00",
        "work_end": "17:00",
    },
    {
        "name": "Lic. Roberto Ruiz",
        "bio": "Psicólogo adulto y adolescente",
        "duration_minutes": 50,
        "work_start": "10:00",
        "work_end": "18:00",
    },
    {
        "name": "Dra. María Gómez",
        "bio": "Psiquiatra, evaluación y manejo farmacológico",
        "duration_minutes": 30,
        "work_start": "08:30",
        "work_end": "14:30",
    },
]


class ProfessionalService:
    """Service layer for professional business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProfessionalRepository()

    def list_professionals(self) -> list[Professional]:
        return self.repo.list_professionals(self.db)

    def get_professional(self, professional_id: int) -> Professional:
        professional = self.repo.get_by_id(self.db, professional_id)
        if not professional:
            raise NotFoundError(f"Professional {professional_id} not found")
        return professional

    def create_professional(self, data: ProfessionalCreate) -> Professional:
        logger.info(f"📥 Adding professional: {data.name}")

        if self.repo.get_by_name(self.db, data.name):
            raise ConflictError(f"Professional '{data.name}' already exists")

        try:
            professional = self.repo.create_professional(
                self.db,
                name=data.name,
                bio=data.bio,
                duration_minutes=data.duration_minutes or DEFAULT_SESSION_MINUTES,
                work_start=data.work_start,
                work_end=data.work_end,
            )
        except IntegrityError as e:
            raise ConflictError(f"Professional '{data.name}' already exists") from e

        logger.info(f"✅ Professional {professional.id} added: {professional.name}")
        return professional

    def update_professional(self, professional_id: int, data: ProfessionalUpdate) -> Professional:
        """Apply the fields present in the request; an explicit null clears an optional field"""
        professional = self.get_professional(professional_id)
        updates = data.model_dump(exclude_unset=True)

        cleared = [field for field in NON_NULLABLE_FIELDS if field in updates and updates[field] is None]
        if cleared:
            raise ValidationError(f"Fields cannot be cleared: {', '.join(cleared)}", fields=cleared)

        if data.name and data.name != professional.name and self.repo.get_by_name(self.db, data.name):
            raise ConflictError(f"Professional '{data.name}' already exists")

        try:
            return self.repo.update_professional(self.db, professional, **updates)
        except IntegrityError as e:
            raise ConflictError(f"Professional '{data.name}' already exists") from e

    def delete_professional(self, professional_id: int) -> dict:
        """Delete a professional with its availability and bookings"""
        professional = self.get_professional(professional_id)
        name = professional.name

        removed_hours = AvailabilityRepository.remove_professional(self.db, professional_id)
        removed_bookings = BookingRepository.delete_for_professional(self.db, professional_id)
        self.repo.delete_professional(self.db, professional)
        commit_session(self.db)

        logger.info(
            f"🗑️ Professional {professional_id} ({name}) deleted: "
            f"{removed_hours} availability entries, {removed_bookings} bookings"
        )
        return {"success": True, "message": f"Professional {name} deleted"}

    def seed_if_empty(self) -> int:
        """Insert the demo professionals on an empty database"""
        if self.repo.count(self.db) > 0:
            return 0

        for data in DEMO_PROFESSIONALS:
            self.db.add(Professional(**data))
        commit_session(self.db)

        logger.info(f"🌱 Seeded {len(DEMO_PROFESSIONALS)} demo professionals")
        return len(DEMO_PROFESSIONALS)
