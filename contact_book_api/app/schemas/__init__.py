"""
Pydantic schema definitions for API payloads.

Schemas are separated from the database layout so that the API can
expose camelCase field names while the ``contacts`` table keeps
snake_case columns.
"""
