"""
Staff service - credential check for the admin and professional views

A plain comparison against configured credentials. It gates which screen is
shown; it does not authorize API calls.
"""

import logging
import secrets
from typing import Optional

from sqlalchemy.orm import Session

from ...config import ADMIN_PASSWORD, ADMIN_USERNAME, STAFF_CREDENTIALS
from ..professionals.repository import ProfessionalRepository
from .schemas import LoginResponse

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"
ROLE_PROFESSIONAL = "professional"


def _matches(supplied: str, expected: Optional[str]) -> bool:
    if expected is None:
        return False
    return secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


class StaffService:
    def __init__(self, db: Session, credentials: Optional[dict[str, str]] = None):
        self.db = db
        self.credentials = STAFF_CREDENTIALS if credentials is None else credentials

    def login(self, name: str, password: str) -> LoginResponse:
        name = name.strip()

        if _matches(name, ADMIN_USERNAME) and _matches(password, ADMIN_PASSWORD):
            logger.info("✅ Admin login")
            return LoginResponse(success=True, role=ROLE_ADMIN)

        if _matches(password, self.credentials.get(name)):
            professional = ProfessionalRepository.get_by_name(self.db, name)
            logger.info(f"✅ Professional login: {name}")
            return LoginResponse(
                success=True,
                role=ROLE_PROFESSIONAL,
                professional_id=professional.id if professional else None,
            )

        logger.warning(f"⚠️ Failed staff login for {name!r}")
        return LoginResponse(success=False)
