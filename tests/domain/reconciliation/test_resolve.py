from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from crmsync.domain.errors import AmbiguousMatchError
from crmsync.domain.model import Account
from crmsync.domain.reconciliation import (
    AmbiguityPolicy,
    find_or_create_parent,
    mark_new,
    mark_updated,
    resolve_parent,
)

if TYPE_CHECKING:
    from tests.helpers.gateway import InMemoryQueryGateway


def test_resolve_parent_creates_missing_parent_with_not_found_policy(
    gateway: InMemoryQueryGateway,
) -> None:
    account = resolve_parent(
        gateway, "Acme", found_policy=mark_updated, not_found_policy=mark_new
    )

    assert account.id is not None
    assert account.name == "Acme"
    assert account.description == "New Account"
    assert [stored.id for stored in gateway.all(Account)] == [account.id]


def test_resolve_parent_twice_keeps_one_parent_and_one_id(gateway: InMemoryQueryGateway) -> None:
    first = resolve_parent(gateway, "Acme", found_policy=mark_updated, not_found_policy=mark_new)
    second = resolve_parent(gateway, "Acme", found_policy=mark_updated, not_found_policy=mark_new)

    stored = gateway.all(Account)
    assert first.id == second.id
    assert len(stored) == 1
    assert stored[0].description == "Updated Account"


def test_resolve_parent_applies_found_policy_to_existing_parent(
    gateway: InMemoryQueryGateway,
) -> None:
    existing = gateway.seed(Account(name="Doe", description="Old", category="Retail"))

    account = resolve_parent(gateway, "Doe", found_policy=mark_updated, not_found_policy=mark_new)

    (stored,) = gateway.all(Account)
    assert account.id == existing.id
    assert stored.description == "Updated Account"
    assert stored.category == "Retail"
    assert [operation for operation, _ in gateway.writes] == ["upsert_by_identifier"]


def test_resolve_parent_takes_first_of_several_matches(gateway: InMemoryQueryGateway) -> None:
    first = gateway.seed(Account(name="Acme", description="first"))
    second = gateway.seed(Account(name="Acme", description="second"))

    account = resolve_parent(gateway, "Acme", found_policy=mark_updated, not_found_policy=mark_new)

    stored = {stored.id: stored for stored in gateway.all(Account)}
    assert account.id == first.id
    assert stored[first.id].description == "Updated Account"
    assert stored[second.id].description == "second"


def test_resolve_parent_strict_ambiguity_raises_without_writing(
    gateway: InMemoryQueryGateway,
) -> None:
    gateway.seed(Account(name="Acme"))
    gateway.seed(Account(name="Acme"))

    with pytest.raises(AmbiguousMatchError):
        resolve_parent(
            gateway,
            "Acme",
            found_policy=mark_updated,
            not_found_policy=mark_new,
            ambiguity=AmbiguityPolicy.STRICT,
        )

    assert gateway.writes == []


def test_find_or_create_parent_leaves_existing_parent_untouched(
    gateway: InMemoryQueryGateway,
) -> None:
    existing = gateway.seed(Account(name="Acme", description="Keep me"))

    account = find_or_create_parent(gateway, "Acme")

    assert account.id == existing.id
    assert account.description == "Keep me"
    assert gateway.writes == []


def test_find_or_create_parent_creates_bare_parent(gateway: InMemoryQueryGateway) -> None:
    account = find_or_create_parent(gateway, "Globex")

    assert account.id is not None
    assert account.description is None
    assert [operation for operation, _ in gateway.writes] == ["create"]
