"""
Domain errors raised by the service layer.

Each error carries a human readable ``message`` and the HTTP status
code the API layer should answer with.  ``main.create_app`` registers
a single exception handler for ``ContactBookError`` which renders the
``{"error": message}`` body.
"""

from typing import Any, List, Optional

from fastapi import status


class ContactBookError(Exception):
    """Base class for all errors the API reports to clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ContactValidationError(ContactBookError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Any]] = None) -> None:
        super().__init__(message)
        self.details = details or []


class DuplicateEmailError(ContactBookError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "A contact with this email already exists"


class ContactNotFoundError(ContactBookError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Contact not found"

    def __init__(self, contact_id: Optional[int] = None) -> None:
        super().__init__()
        self.contact_id = contact_id


class StoreUnavailableError(ContactBookError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Contact store unavailable"
