"""
ResourcePulse Backend - Pydantic Schemas Package
================================================

Request/response contracts, one module per resource. Kept separate from the
ORM models so the API shape can change independently of the tables and so
internal columns (password hashes) never leak.
"""
