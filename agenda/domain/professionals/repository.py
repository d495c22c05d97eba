"""Professional repository - Database operations for professionals"""

from typing import Optional

from sqlalchemy.orm import Session

from ...database import commit_session
from ...models import Professional


class ProfessionalRepository:
    """Repository for professional database operations"""

    @staticmethod
    def list_professionals(db: Session) -> list[Professional]:
        return db.query(Professional).order_by(Professional.name.asc()).all()

    @staticmethod
    def get_by_id(db: Session, professional_id: int) -> Optional[Professional]:
        return db.query(Professional).filter(Professional.id == professional_id).first()

    @staticmethod
    def get_by_name(db: Session, name: str) -> Optional[Professional]:
        return db.query(Professional).filter(Professional.name == name).first()

    @staticmethod
    def lock_by_id(db: Session, professional_id: int) -> Optional[Professional]:
        """Load a professional holding a row lock until the transaction ends (no-op on SQLite)"""
        return (
            db.query(Professional)
            .filter(Professional.id == professional_id)
            .with_for_update()
            .first()
        )

    @staticmethod
    def count(db: Session) -> int:
        return db.query(Professional).count()

    @staticmethod
    def create_professional(db: Session, **data) -> Professional:
        professional = Professional(**data)
        db.add(professional)
        commit_session(db)
        db.refresh(professional)
        return professional

    @staticmethod
    def update_professional(db: Session, professional: Professional, **updates) -> Professional:
        for key, value in updates.items():
            if hasattr(professional, key):
                setattr(professional, key, value)

        commit_session(db)
        db.refresh(professional)
        return professional

    @staticmethod
    def delete_professional(db: Session, professional: Professional) -> None:
        """Stage the delete; the caller commits together with the cascade"""
        db.delete(professional)
