"""SQLAlchemy adapter package for crmsync."""

from __future__ import annotations

from .gateway import SqlAlchemyQueryGateway
from .mappings import (
    CLASS_BY_ENTITY_KIND,
    TABLE_BY_CLASS,
    create_all_tables,
    mapper_registry,
    start_mappers,
)
from .unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "CLASS_BY_ENTITY_KIND",
    "TABLE_BY_CLASS",
    "SqlAlchemyQueryGateway",
    "SqlAlchemyReconciliationUnitOfWork",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
