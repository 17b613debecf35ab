"""Attribute and ambiguity policies applied while reconciling records.

An attribute policy is a callable that overwrites the mutable fields of one entity. The
resolver and reconciler apply policies unconditionally: fields a policy controls are
overwritten, never merged, which keeps repeated runs idempotent.
"""

from __future__ import annotations

import calendar
import logging
from collections.abc import Callable
from datetime import date
from enum import StrEnum
from typing import TYPE_CHECKING

from crmsync.domain.errors import AmbiguousMatchError
from crmsync.domain.model import OpportunityStage

if TYPE_CHECKING:
    from collections.abc import Sequence
    from decimal import Decimal

    from crmsync.domain.model import Entity

type AttributePolicy = Callable[[Entity], None]

log = logging.getLogger(__name__)

NEW_ACCOUNT_DESCRIPTION = "New Account"
UPDATED_ACCOUNT_DESCRIPTION = "Updated Account"
DEFAULT_CLOSE_IN_MONTHS = 3


class AmbiguityPolicy(StrEnum):
    """What to do when a natural key matches more than one stored record."""

    FIRST = "first"
    STRICT = "strict"


def pick_match[TEntity: Entity](
    matches: Sequence[TEntity],
    key: str,
    *,
    ambiguity: AmbiguityPolicy = AmbiguityPolicy.FIRST,
) -> TEntity | None:
    """Return the canonical match for ``key`` or ``None`` when nothing matched.

    Under ``FIRST`` the first match in store order wins and the duplicates are logged;
    under ``STRICT`` several matches raise ``AmbiguousMatchError``.
    """

    if not matches:
        return None
    if len(matches) > 1:
        candidate_ids = [match.id for match in matches]
        if ambiguity is AmbiguityPolicy.STRICT:
            raise AmbiguousMatchError(matches[0].entity_kind, key, candidate_ids)
        log.warning(
            "%s %s records match %r; using id=%s (candidates: %s)",
            len(matches),
            matches[0].entity_kind,
            key,
            matches[0].id,
            candidate_ids,
        )
    return matches[0]


def set_attributes(**values: object) -> AttributePolicy:
    """Build a policy that overwrites the given attributes."""

    def apply(entity: Entity) -> None:
        entity.apply_attributes(values)

    return apply


mark_new = set_attributes(description=NEW_ACCOUNT_DESCRIPTION)
mark_updated = set_attributes(description=UPDATED_ACCOUNT_DESCRIPTION)


def add_months(start: date, months: int) -> date:
    """Shift ``start`` by calendar months, clamping the day to the target month's end."""

    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def opportunity_policy(
    *,
    stage: str = OpportunityStage.PROSPECTING,
    close_in_months: int = DEFAULT_CLOSE_IN_MONTHS,
    amount: Decimal | None = None,
    today: date | None = None,
) -> AttributePolicy:
    """Policy stamping stage, close date and amount onto opportunities.

    ``today`` is resolved once, when the policy is built, so every opportunity in one
    batch receives the same close date.
    """

    close_date = add_months(today or date.today(), close_in_months)
    return set_attributes(stage=stage, close_date=close_date, amount=amount)
