"""
Top‑level package for the Contact Book API.

All functionality lives in submodules under ``app``; importing
``contact_book_api.app.main`` gives access to the FastAPI instance.
"""

__all__ = []
