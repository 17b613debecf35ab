"""Batch reconciliation of child records under a single parent.

Flow:
1) collapse duplicate child keys (first occurrence wins the position)
2) find-or-create the parent by key
3) look up existing children of that parent in one query
4) reuse matches, build the misses, overwrite policy-controlled fields, stamp the parent
5) upsert the whole set in one batch

The same read-then-write caveat as parent resolution applies: concurrent runs over the
same parent and keys can each create the missing children.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from crmsync.domain.model import Account, Opportunity, new_child
from crmsync.domain.reconciliation.policy import AmbiguityPolicy
from crmsync.domain.reconciliation.resolve import find_or_create_parent

if TYPE_CHECKING:
    from collections.abc import Iterable

    from crmsync.domain.model import ChildEntity, ParentEntity
    from crmsync.domain.ports.gateway import QueryGateway
    from crmsync.domain.reconciliation.policy import AttributePolicy

log = logging.getLogger(__name__)


@dataclass
class ReconcileResult[TParent: ParentEntity, TChild: ChildEntity]:
    """Outcome of reconciling one parent's children."""

    parent: TParent | None
    children: tuple[TChild, ...]
    created: int
    updated: int


def distinct_keys(keys: Iterable[str]) -> tuple[str, ...]:
    """Drop repeated keys, keeping the order of first appearance."""

    return tuple(dict.fromkeys(keys))


def reconcile_children[TParent: ParentEntity, TChild: ChildEntity](
    gateway: QueryGateway,
    parent_key: str,
    child_keys: Iterable[str],
    attribute_policy: AttributePolicy,
    *,
    kind: type[TChild] = Opportunity,
    parent_kind: type[TParent] = Account,
    ambiguity: AmbiguityPolicy = AmbiguityPolicy.FIRST,
) -> ReconcileResult[TParent, TChild]:
    """Upsert one child per distinct key under the parent named ``parent_key``.

    Existing children keep their ids and get their policy-controlled fields overwritten.
    An empty key set touches nothing: no lookup and no write.
    """

    keys = distinct_keys(child_keys)
    if not keys:
        log.debug("No %s keys for %r; nothing to reconcile", kind.ENTITY_KIND, parent_key)
        return ReconcileResult(parent=None, children=(), created=0, updated=0)

    parent = find_or_create_parent(gateway, parent_key, kind=parent_kind, ambiguity=ambiguity)
    if parent.id is None:
        raise RuntimeError(f"Parent {parent_key!r} has no id after persistence")

    existing = gateway.find_by_keys_under_parent(kind, keys, parent.id)

    batch: list[TChild] = []
    created = 0
    for key in keys:
        child = existing.get(key)
        if child is None:
            child = new_child(kind, key)
            created += 1
        attribute_policy(child)
        child.parent_ref = parent.id
        batch.append(child)

    persisted = gateway.upsert_by_identifier(batch)
    updated = len(persisted) - created
    log.info(
        "Reconciled %s %s record(s) under %s %r (id=%s): created=%s, updated=%s",
        len(persisted),
        kind.ENTITY_KIND,
        parent_kind.ENTITY_KIND,
        parent_key,
        parent.id,
        created,
        updated,
    )
    return ReconcileResult(parent=parent, children=persisted, created=created, updated=updated)
