"""
Offset pagination helpers.

``page`` is 1‑based.  A page past the last one is not an error: it
yields an empty window and metadata that still reports the real
``total`` and ``totalPages``.
"""

import math

from contact_book_api.app.core.exceptions import ContactValidationError
from contact_book_api.app.schemas.pagination import PaginationMeta


def _check_window(page: int, limit: int) -> None:
    details = []
    if page < 1:
        details.append({"field": "page", "message": "Input should be greater than or equal to 1"})
    if limit < 1:
        details.append({"field": "limit", "message": "Input should be greater than or equal to 1"})
    if details:
        raise ContactValidationError("Invalid pagination parameters", details=details)


def page_offset(page: int, limit: int) -> int:
    """Return the SQL ``OFFSET`` for a 1‑based ``page`` of size ``limit``."""
    _check_window(page, limit)
    return (page - 1) * limit


def build_pagination(page: int, limit: int, total: int) -> PaginationMeta:
    """Derive pagination metadata from the requested window and row count."""
    _check_window(page, limit)
    total_pages = math.ceil(total / limit)
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
    )
