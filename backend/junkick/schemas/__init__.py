"""
Junkick Backend — Pydantic Schemas
====================================

API contracts, kept separate from the ORM models so the wire format
(camelCase, populated references, no credential fields) can evolve
independently of the tables.
"""
