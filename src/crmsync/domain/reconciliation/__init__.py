"""Record reconciliation against the query gateway.

Layered flow:
1) resolve a natural key to one persisted parent (``resolve``)
2) reconcile a set of child keys under one parent (``batch``)
3) link free-standing children to parents derived from them (``link``)
"""

from __future__ import annotations

from .batch import ReconcileResult, distinct_keys, reconcile_children
from .link import contact_last_name, link_children_to_parents
from .policy import (
    AmbiguityPolicy,
    AttributePolicy,
    add_months,
    mark_new,
    mark_updated,
    opportunity_policy,
    pick_match,
    set_attributes,
)
from .resolve import find_or_create_parent, resolve_parent

__all__ = [
    "AmbiguityPolicy",
    "AttributePolicy",
    "ReconcileResult",
    "add_months",
    "contact_last_name",
    "distinct_keys",
    "find_or_create_parent",
    "link_children_to_parents",
    "mark_new",
    "mark_updated",
    "opportunity_policy",
    "pick_match",
    "reconcile_children",
    "resolve_parent",
    "set_attributes",
]
