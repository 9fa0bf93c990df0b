"""
Daylog Backend — Application Package
======================================

Personal record-keeping API: notes, habit check-ins and daily diary
entries, scoped to an anonymous per-client identity token.

Layers:
    Routes (HTTP) → Services (business rules) → Models (SQLAlchemy)
    Schemas (Pydantic) define the wire format on both sides of the routes.
"""

__version__ = "1.0.0"
