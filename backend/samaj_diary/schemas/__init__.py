"""Pydantic Schemas: request/response validation for API endpoints.

Invariants:
    - Schemas validate at the HTTP boundary; persisted shapes live in models/
    - Incoming text fields are stripped before business rules see them
"""
