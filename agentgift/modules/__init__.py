"""Feature modules live here. Each module may define:

- models.py   (SQLAlchemy models using agentgift.core.database.Base)
- schemas.py  (Pydantic models)
- service.py  (business logic)
- repository.py (data access)
- bootstrap.py (idempotent seed data)
- router.py   (FastAPI APIRouter exported as `router`)

Routers are auto-discovered and included; models are auto-imported
so that `ensure_core_schema` sees every table.
"""
