"""
RondaGuard Backend - Application Package
========================================

What: Persistence and API backend for security rounds: users, checklist
      templates, tasks, round logs with photo evidence, and tenant settings.
Who:  Imported by uvicorn (`rondaguard.main:app`), Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (per-aggregate ops)      │  ← validation, orchestration
    ├─────────────────────────────────────┤
    │  Upsert Engine  │ Aggregate Reader  │  ← multi-table write / read
    ├─────────────────────────────────────┤
    │  Codec  │  Schemas  │  ORM Models   │  ← wire shape <-> row shape
    ├─────────────────────────────────────┤
    │     Database façade (pool + tx)     │  ← async SQLAlchemy
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
