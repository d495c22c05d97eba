"""
Domain errors

Services raise these; main.py maps them to HTTP responses.
"""

from typing import Optional


class AgendaError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.message}


class ValidationError(AgendaError):
    """Bad or missing input, fixable by the client"""

    status_code = 400

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        super().__init__(message)
        self.fields = fields or []

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["fields"] = self.fields
        return data


class NotFoundError(AgendaError):
    status_code = 404


class ConflictError(AgendaError):
    status_code = 409


class ProviderError(AgendaError):
    """External meeting/email provider failure. Logged, never fatal to a booking"""

    status_code = 502


class StorageError(AgendaError):
    status_code = 500
