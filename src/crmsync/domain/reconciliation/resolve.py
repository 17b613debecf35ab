"""Parent resolution: map one natural key to exactly one persisted account.

Responsibilities of this stage:
- look the key up through the query gateway and pick the canonical match
- apply the found / not-found attribute policy
- upsert and hand back the persisted parent (``id`` always set)

Find-or-create is a read followed by a write and is not atomic. Two concurrent callers
resolving the same key can both miss and both create. Callers must serialise
reconciliation per key space; no locking happens here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from crmsync.domain.model import Account
from crmsync.domain.reconciliation.policy import AmbiguityPolicy, pick_match

if TYPE_CHECKING:
    from crmsync.domain.model import ParentEntity
    from crmsync.domain.ports.gateway import QueryGateway
    from crmsync.domain.reconciliation.policy import AttributePolicy

log = logging.getLogger(__name__)


def resolve_parent[TParent: ParentEntity](
    gateway: QueryGateway,
    key: str,
    *,
    found_policy: AttributePolicy,
    not_found_policy: AttributePolicy,
    kind: type[TParent] = Account,
    ambiguity: AmbiguityPolicy = AmbiguityPolicy.FIRST,
) -> TParent:
    """Find-or-create the parent for ``key`` and persist the policy's changes.

    Calling this twice with the same key takes the "found" branch the second time and
    returns the same id.
    """

    existing = pick_match(gateway.find_by_key(kind, key), key, ambiguity=ambiguity)
    if existing is None:
        parent = kind(**{kind.NATURAL_KEY_FIELD: key})
        not_found_policy(parent)
        log.debug("Creating %s %r", kind.ENTITY_KIND, key)
    else:
        parent = existing
        found_policy(parent)
        log.debug("Updating %s %r (id=%s)", kind.ENTITY_KIND, key, parent.id)

    (persisted,) = gateway.upsert_by_identifier([parent])
    return persisted


def find_or_create_parent[TParent: ParentEntity](
    gateway: QueryGateway,
    key: str,
    *,
    kind: type[TParent] = Account,
    ambiguity: AmbiguityPolicy = AmbiguityPolicy.FIRST,
) -> TParent:
    """Resolve ``key`` to a parent id only: an existing match is returned untouched,
    a missing one is created with just its natural key set."""

    existing = pick_match(gateway.find_by_key(kind, key), key, ambiguity=ambiguity)
    if existing is not None:
        return existing
    log.debug("Creating bare %s %r", kind.ENTITY_KIND, key)
    parent = kind(**{kind.NATURAL_KEY_FIELD: key})
    (persisted,) = gateway.create([parent])
    return persisted
