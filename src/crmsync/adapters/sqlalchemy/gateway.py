"""Query gateway backed by a SQLAlchemy session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from crmsync.adapters.sqlalchemy.mappings import TABLE_BY_CLASS, natural_key_column
from crmsync.domain.errors import WriteRejectedError
from crmsync.domain.model import Account, ChildEntity, Entity

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from sqlalchemy.orm import Session

log = logging.getLogger(__name__)


class SqlAlchemyQueryGateway:
    """Reads and batch writes against one session.

    Writes flush but never commit; the surrounding unit of work owns the transaction and
    rolls it back when a batch is rejected.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self.writes = 0

    def find_by_key[TEntity: Entity](self, kind: type[TEntity], key: str) -> tuple[TEntity, ...]:
        table = TABLE_BY_CLASS[kind]
        stmt = select(kind).where(natural_key_column(kind) == key).order_by(table.c.id)
        return tuple(self.session.scalars(stmt).all())

    def find_by_keys_under_parent[TChild: ChildEntity](
        self,
        kind: type[TChild],
        keys: Iterable[str],
        parent_id: int,
    ) -> dict[str, TChild]:
        wanted = set(keys)
        if not wanted:
            return {}
        table = TABLE_BY_CLASS[kind]
        stmt = (
            select(kind)
            .where(table.c.account_id == parent_id)
            .where(natural_key_column(kind).in_(wanted))
            .order_by(table.c.id)
        )
        found: dict[str, TChild] = {}
        for child in self.session.scalars(stmt):
            key = child.natural_key
            if key in found:
                log.warning(
                    "Duplicate %s %r under account id=%s; keeping id=%s, ignoring id=%s",
                    kind.ENTITY_KIND,
                    key,
                    parent_id,
                    found[key].id,
                    child.id,
                )
                continue
            found[key] = child
        return found

    def create[TEntity: Entity](self, entities: Sequence[TEntity]) -> tuple[TEntity, ...]:
        batch = tuple(entities)
        for entity in batch:
            if entity.id is not None:
                raise WriteRejectedError(
                    f"Cannot create {entity.entity_kind} {entity.natural_key!r}: "
                    f"already has id={entity.id}"
                )
        return self._write(batch)

    def update[TEntity: Entity](self, entities: Sequence[TEntity]) -> tuple[TEntity, ...]:
        batch = tuple(entities)
        for entity in batch:
            if entity.id is None:
                raise WriteRejectedError(
                    f"Cannot update {entity.entity_kind} {entity.natural_key!r}: no id assigned"
                )
        return self._write(batch)

    def upsert_by_identifier[TEntity: Entity](
        self, entities: Sequence[TEntity]
    ) -> tuple[TEntity, ...]:
        return self._write(tuple(entities))

    def _write[TEntity: Entity](self, batch: tuple[TEntity, ...]) -> tuple[TEntity, ...]:
        if not batch:
            return ()
        for entity in batch:
            self._check_writable(entity)

        persisted = tuple(self._stage(entity) for entity in batch)
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            raise WriteRejectedError(f"Store rejected a batch of {len(batch)} record(s)") from exc
        self.writes += 1
        log.debug("Flushed batch of %s record(s)", len(batch))
        return persisted

    def _stage[TEntity: Entity](self, entity: TEntity) -> TEntity:
        if entity.id is None:
            self.session.add(entity)
            return entity
        return self.session.merge(entity)

    def _check_writable(self, entity: Entity) -> None:
        key = entity.natural_key
        if not isinstance(key, str) or not key.strip():
            raise WriteRejectedError(f"{entity.entity_kind} requires a non-blank natural key")
        if entity.id is not None and self.session.get(type(entity), entity.id) is None:
            raise WriteRejectedError(f"No {entity.entity_kind} with id={entity.id} to update")
        if isinstance(entity, ChildEntity):
            parent_ref = entity.parent_ref
            if parent_ref is None:
                raise WriteRejectedError(f"{entity.entity_kind} {key!r} has no parent reference")
            if self.session.get(Account, parent_ref) is None:
                raise WriteRejectedError(
                    f"{entity.entity_kind} {key!r} references missing account id={parent_ref}"
                )


if TYPE_CHECKING:
    from crmsync.domain.ports.gateway import QueryGateway

    _session_stub = cast("Session", object())
    _gateway_check: QueryGateway = SqlAlchemyQueryGateway(_session_stub)
