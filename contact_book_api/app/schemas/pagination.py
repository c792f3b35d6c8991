"""Pagination metadata returned with every list and search response."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PaginationMeta(BaseModel):
    """Offset pagination metadata.

    Every field except ``page``, ``limit`` and ``total`` is derived from
    those three values; see ``services.pagination.build_pagination``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    has_next_page: bool
    has_previous_page: bool
