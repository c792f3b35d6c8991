"""
Contact endpoints for API v1.

These routes expose list, search, create, read, update and delete
operations for contacts.  Request bodies and query parameters are
validated by FastAPI before the service is called; validation
failures, duplicate e‑mails and unknown IDs are rendered by the
exception handlers registered in ``main.create_app``.
"""

from typing import Optional

from fastapi import APIRouter, Query, status

from contact_book_api.app.core.config import settings
from contact_book_api.app.schemas.contact import (
    ContactCreate,
    ContactListResponse,
    ContactRead,
    ContactStats,
    ContactUpdate,
)
from contact_book_api.app.services.contact_service import ContactService

router = APIRouter()


@router.get("", response_model=ContactListResponse)
async def list_contacts(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
) -> ContactListResponse:
    """Return a page of contacts ordered by creation time, oldest first."""
    return await ContactService.list_contacts(page=page, limit=limit)


@router.get("/search", response_model=ContactListResponse)
async def search_contacts(
    q: Optional[str] = Query(None, max_length=200, description="Case-insensitive substring"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
) -> ContactListResponse:
    """Search contacts by first name, last name, e‑mail or phone.

    An empty or missing ``q`` returns the same page as the list
    endpoint.
    """
    return await ContactService.search_contacts(q, page=page, limit=limit)


@router.get("/stats", response_model=ContactStats)
async def contact_stats() -> ContactStats:
    total = await ContactService.count_contacts()
    return ContactStats(total_contacts=total)


@router.post("", response_model=ContactRead, status_code=status.HTTP_201_CREATED)
async def create_contact(contact_in: ContactCreate) -> ContactRead:
    """Create a new contact.

    Returns HTTP 400 if the body is invalid or the e‑mail is already
    used by another contact.
    """
    return await ContactService.create_contact(contact_in)


@router.get("/{contact_id}", response_model=ContactRead)
async def get_contact(contact_id: int) -> ContactRead:
    """Retrieve a single contact by ID, or HTTP 404."""
    return await ContactService.get_contact(contact_id)


@router.patch("/{contact_id}", response_model=ContactRead)
async def update_contact(contact_id: int, contact_in: ContactUpdate) -> ContactRead:
    """Update the supplied fields of a contact."""
    return await ContactService.update_contact(contact_id, contact_in)


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contact(contact_id: int) -> None:
    """Delete a contact, or HTTP 404 if it does not exist."""
    await ContactService.delete_contact(contact_id)
    return None
