"""
Application package initializer.

The API is split into a few small pieces: ``core`` (settings, logging,
database and error types), ``schemas`` (pydantic payload models),
``services`` (SQL-backed business logic) and ``api`` (versioned
routers under ``api/<version>/``).
"""

from .main import app  # noqa: F401
