"""Domain port definitions for adapters."""

from __future__ import annotations

from .gateway import QueryGateway
from .unit_of_work import (
    ReconciliationRepositories,
    ReconciliationUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "QueryGateway",
    "ReconciliationRepositories",
    "ReconciliationUnitOfWork",
    "RepositoryCollection",
    "UnitOfWork",
]
