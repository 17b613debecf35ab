"""SQLAlchemy mapping metadata for the crmsync domain model."""

from __future__ import annotations

import logging
from functools import cache
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    orm,
)
from sqlalchemy.orm import configure_mappers

from crmsync.domain.model import Account, Contact, Entity, EntityKind, Opportunity

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Core tables -----------------------------------------------------------------

# Natural keys are deliberately not unique: reconciliation, not the schema, keeps them so.
account_table = Table(
    "account",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False),
    Column("description", String, nullable=True),
    Column("category", String, nullable=True),
    Index("ix_account_name", "name"),
)

contact_table = Table(
    "contact",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("account_id", Integer, ForeignKey("account.id"), nullable=False),
    Column("last_name", String, nullable=False),
    Column("first_name", String, nullable=True),
    Column("email", String, nullable=True),
    Index("ix_contact_account_last_name", "account_id", "last_name"),
)

opportunity_table = Table(
    "opportunity",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("account_id", Integer, ForeignKey("account.id"), nullable=False),
    Column("name", String, nullable=False),
    Column("stage", String, nullable=True),
    Column("close_date", Date, nullable=True),
    Column("amount", Numeric(14, 2), nullable=True),
    Index("ix_opportunity_account_name", "account_id", "name"),
)

TABLE_BY_CLASS: Final[dict[type[Entity], Table]] = {
    Account: account_table,
    Contact: contact_table,
    Opportunity: opportunity_table,
}
CLASS_BY_ENTITY_KIND: Final[dict[EntityKind, type[Entity]]] = {
    cls.ENTITY_KIND: cls for cls in TABLE_BY_CLASS
}


def natural_key_column(kind: type[Entity]) -> ColumnElement[str]:
    return TABLE_BY_CLASS[kind].c[kind.NATURAL_KEY_FIELD]


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")
    for cls, table in TABLE_BY_CLASS.items():
        mapper_registry.map_imperatively(cls, table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
