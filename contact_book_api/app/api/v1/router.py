"""
Top‑level router for version 1 of the API.

This router aggregates the domain routers under a unified prefix.
When new endpoints are added, include their routers here.
"""

from fastapi import APIRouter

from .endpoints import contacts, health

router = APIRouter()

router.include_router(contacts.router, prefix="/contacts", tags=["contacts"])
# The health router defines its own "/health" path.
router.include_router(health.router, tags=["health"])
