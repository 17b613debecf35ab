"""
Base building blocks:
store-assigned identity, natural keys, mutable attribute sets.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from collections.abc import Mapping

    from crmsync.domain.model.enums import EntityKind


@dataclass(eq=False, kw_only=True)
class Entity:
    """Identity is assigned by the store; ``id`` stays ``None`` until first persistence."""

    id: int | None = None

    # class-level contract; subclasses must override
    ENTITY_KIND: ClassVar[EntityKind]
    NATURAL_KEY_FIELD: ClassVar[str]
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]]

    @property
    def entity_kind(self) -> EntityKind:
        return self.ENTITY_KIND

    @property
    def natural_key(self) -> str:
        return getattr(self, self.NATURAL_KEY_FIELD)

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    @property
    def attributes(self) -> dict[str, object]:
        """Snapshot of the mutable business fields."""
        return {name: getattr(self, name) for name in self.MUTABLE_FIELDS}

    def apply_attributes(self, values: Mapping[str, object]) -> None:
        """Overwrite mutable fields; unknown names are rejected before anything changes."""
        unknown = sorted(set(values) - set(self.MUTABLE_FIELDS))
        if unknown:
            raise ValueError(
                f"{type(self).__name__} has no mutable attribute(s): {', '.join(unknown)}"
            )
        for name, value in values.items():
            setattr(self, name, value)


@dataclass(eq=False, kw_only=True)
class ParentEntity(Entity):
    """Top-level record looked up by natural key alone."""


@dataclass(eq=False, kw_only=True)
class ChildEntity(Entity):
    """Dependent record; natural keys are unique only within one parent."""

    account_id: int | None = None

    @property
    def parent_ref(self) -> int | None:
        return self.account_id

    @parent_ref.setter
    def parent_ref(self, value: int | None) -> None:
        self.account_id = value
