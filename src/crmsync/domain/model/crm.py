"""CRM records: accounts and the contacts and opportunities that hang off them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from crmsync.domain.model.base import ChildEntity, ParentEntity
from crmsync.domain.model.enums import EntityKind

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal


@dataclass(eq=False, kw_only=True)
class Account(ParentEntity):
    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.ACCOUNT
    NATURAL_KEY_FIELD: ClassVar[str] = "name"
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = ("description", "category")

    name: str
    description: str | None = None
    category: str | None = None


@dataclass(eq=False, kw_only=True)
class Contact(ChildEntity):
    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.CONTACT
    NATURAL_KEY_FIELD: ClassVar[str] = "last_name"
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = ("first_name", "email")

    last_name: str
    first_name: str | None = None
    email: str | None = None


@dataclass(eq=False, kw_only=True)
class Opportunity(ChildEntity):
    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.OPPORTUNITY
    NATURAL_KEY_FIELD: ClassVar[str] = "name"
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = ("stage", "close_date", "amount")

    name: str
    stage: str | None = None
    close_date: date | None = None
    amount: Decimal | None = None


def new_child[TChild: ChildEntity](kind: type[TChild], key: str) -> TChild:
    """Build an unpersisted child of ``kind`` carrying only its natural key."""

    return kind(**{kind.NATURAL_KEY_FIELD: key})
