"""Link children to parents derived from the children themselves.

Each child triggers its own parent resolution, even when several children derive the
same key; repeated resolutions of one key are absorbed by the resolver taking its
"found" branch. The children are then upserted in a single batch.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from crmsync.domain.model import Account
from crmsync.domain.reconciliation.policy import AmbiguityPolicy, mark_new, mark_updated
from crmsync.domain.reconciliation.resolve import resolve_parent

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from crmsync.domain.model import ChildEntity, Contact, ParentEntity
    from crmsync.domain.ports.gateway import QueryGateway
    from crmsync.domain.reconciliation.policy import AttributePolicy

log = logging.getLogger(__name__)


def contact_last_name(contact: Contact) -> str:
    return contact.last_name


def link_children_to_parents[TChild: ChildEntity](
    gateway: QueryGateway,
    children: Iterable[TChild],
    derive_key: Callable[[TChild], str],
    *,
    found_policy: AttributePolicy = mark_updated,
    not_found_policy: AttributePolicy = mark_new,
    parent_kind: type[ParentEntity] = Account,
    ambiguity: AmbiguityPolicy = AmbiguityPolicy.FIRST,
) -> tuple[TChild, ...]:
    """Resolve a parent per child, stamp ``parent_ref`` and upsert all children at once."""

    linked: list[TChild] = []
    for child in children:
        key = derive_key(child)
        parent = resolve_parent(
            gateway,
            key,
            found_policy=found_policy,
            not_found_policy=not_found_policy,
            kind=parent_kind,
            ambiguity=ambiguity,
        )
        child.parent_ref = parent.id
        linked.append(child)

    persisted = gateway.upsert_by_identifier(linked)
    log.info("Linked %s record(s) to their parents", len(persisted))
    return persisted
