"""
Service layer.

Services talk to the SQLite store directly through parameterised SQL
and return pydantic schemas to the API layer.
"""
