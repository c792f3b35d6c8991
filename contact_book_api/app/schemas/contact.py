"""
Pydantic schemas for contacts.

The API speaks camelCase (``firstName``, ``createdAt``) while the
service and the ``contacts`` table use snake_case.  An alias
generator maps between the two; request bodies are accepted in either
form.

Phone numbers are optional.  Absent, ``null`` and blank values are all
normalised to ``None`` so the table only ever stores ``NULL`` for a
missing phone.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from .pagination import PaginationMeta


CAMEL_CASE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
)


class ContactCreate(BaseModel):
    """Schema for creating a contact.  All fields except ``phone`` are required."""

    model_config = CAMEL_CASE_CONFIG

    first_name: str = Field(..., min_length=1, max_length=100, examples=["Jane"])
    last_name: str = Field(..., min_length=1, max_length=100, examples=["Doe"])
    email: EmailStr = Field(..., examples=["jane@example.com"])
    phone: Optional[str] = Field(None, max_length=50, examples=["555-0123"])

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("phone", mode="before")
    @classmethod
    def blank_phone_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ContactUpdate(BaseModel):
    """Schema for partially updating a contact.

    All fields are optional; only the fields present in the request
    body are written.  ``firstName``, ``lastName`` and ``email`` may be
    omitted but not set to ``null``.  Sending ``"phone": null`` (or an
    empty string) clears the phone number.
    """

    model_config = CAMEL_CASE_CONFIG

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("phone", mode="before")
    @classmethod
    def blank_phone_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("first_name", "last_name", "email")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field may not be null")
        return value

    def changes(self) -> dict:
        """Return the explicitly supplied fields keyed by column name."""
        return self.model_dump(exclude_unset=True)


class ContactRead(BaseModel):
    """Schema for reading a contact from the API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ContactListResponse(BaseModel):
    """A page of contacts together with its pagination metadata."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    contacts: List[ContactRead]
    pagination: PaginationMeta


class ContactStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_contacts: int
