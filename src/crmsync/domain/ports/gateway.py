"""Query gateway port: the only boundary between reconciliation and the record store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from crmsync.domain.model import ChildEntity, Entity


@runtime_checkable
class QueryGateway(Protocol):
    """Synchronous, batched access to persisted records.

    Lookups never raise for "not found"; an empty result is the signal. Batch writes are
    all-or-nothing from the caller's perspective and raise ``WriteRejectedError`` when the
    store refuses any entity in the batch. Writes return the persisted entities in input
    order with store-assigned ids; callers should continue with the returned objects.
    """

    def find_by_key[TEntity: Entity](self, kind: type[TEntity], key: str) -> tuple[TEntity, ...]:
        """Exact natural-key match, ordered by id ascending."""
        ...

    def find_by_keys_under_parent[TChild: ChildEntity](
        self,
        kind: type[TChild],
        keys: Iterable[str],
        parent_id: int,
    ) -> dict[str, TChild]:
        """Children of ``parent_id`` whose natural key is in ``keys``; misses are absent."""
        ...

    def create[TEntity: Entity](self, entities: Sequence[TEntity]) -> tuple[TEntity, ...]: ...

    def update[TEntity: Entity](self, entities: Sequence[TEntity]) -> tuple[TEntity, ...]: ...

    def upsert_by_identifier[TEntity: Entity](
        self, entities: Sequence[TEntity]
    ) -> tuple[TEntity, ...]:
        """Create entities without an id, update the ones that carry one."""
        ...
