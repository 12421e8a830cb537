"""
Module ORM Registry (``workshop_modules._orm_registry``).

Responsibility
--------------
Ensure every module-level SQLAlchemy ORM model is imported so that
``Base.metadata`` contains their table definitions before
``workshop_kernel.db.engine.create_tables()`` runs.

Architecture position
---------------------
**Modules layer** -- utility.  Imported lazily by the kernel's
``create_tables``; MUST NOT import anything at module level.
"""


def import_all_orm_models() -> None:
    """Import every ``workshop_modules.*.orm`` module (idempotent)."""
    import workshop_modules.financial.orm  # noqa: F401
    import workshop_modules.invoicing.orm  # noqa: F401
    import workshop_modules.orders.orm  # noqa: F401
    import workshop_modules.stock.orm  # noqa: F401
