"""Public domain model surface."""

from __future__ import annotations

from crmsync.domain.model.base import ChildEntity, Entity, ParentEntity
from crmsync.domain.model.crm import Account, Contact, Opportunity, new_child
from crmsync.domain.model.enums import EntityKind, OpportunityStage

__all__ = [
    "Account",
    "ChildEntity",
    "Contact",
    "Entity",
    "EntityKind",
    "Opportunity",
    "OpportunityStage",
    "ParentEntity",
    "new_child",
]
