"""Application orchestration entry points.

Each service runs one reconciliation operation inside its own unit of work and commits
only when the whole operation succeeded; a rejected batch rolls everything back.
Services are not safe to run concurrently over overlapping natural keys.
"""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from crmsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    is_started,
    startup,
)
from crmsync.config import get_reconciliation_config, load_environment
from crmsync.domain.model import OpportunityStage
from crmsync.domain.ports.unit_of_work import ReconciliationUnitOfWork
from crmsync.domain.reconciliation import (
    contact_last_name,
    link_children_to_parents,
    mark_new,
    mark_updated,
    opportunity_policy,
    reconcile_children,
    resolve_parent,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date
    from decimal import Decimal

    from crmsync.config import ReconciliationConfig
    from crmsync.domain.model import Account, Contact, Opportunity
    from crmsync.domain.reconciliation import AttributePolicy, ReconcileResult

UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]


log = getLogger(__name__)


def _settings(config: ReconciliationConfig | None) -> ReconciliationConfig:
    if config is not None:
        return config
    load_environment()
    return get_reconciliation_config()


def _unit_of_work(factory: UnitOfWorkFactory | None) -> ReconciliationUnitOfWork:
    if factory is not None:
        return factory()
    if not is_started():
        startup()
    return SqlAlchemyReconciliationUnitOfWork()


def resolve_account(
    name: str,
    *,
    found_policy: AttributePolicy = mark_updated,
    not_found_policy: AttributePolicy = mark_new,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ReconciliationConfig | None = None,
) -> Account:
    """Find-or-create the account called ``name`` and commit the result."""

    settings = _settings(config)
    with _unit_of_work(unit_of_work_factory) as uow:
        account = resolve_parent(
            uow.repositories.gateway,
            name,
            found_policy=found_policy,
            not_found_policy=not_found_policy,
            ambiguity=settings.ambiguity,
        )
        uow.commit()
    log.info("Resolved account %r (id=%s)", name, account.id)
    return account


def reconcile_opportunities(
    account_name: str,
    opportunity_names: Iterable[str],
    *,
    stage: str | None = None,
    amount: Decimal | None = None,
    today: date | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ReconciliationConfig | None = None,
) -> ReconcileResult[Account, Opportunity]:
    """Upsert one opportunity per distinct name under ``account_name``."""

    settings = _settings(config)
    policy = opportunity_policy(
        stage=stage or OpportunityStage.PROSPECTING,
        close_in_months=settings.close_in_months,
        amount=amount,
        today=today,
    )
    log.info("Starting opportunity reconciliation for account %r", account_name)
    with _unit_of_work(unit_of_work_factory) as uow:
        result = reconcile_children(
            uow.repositories.gateway,
            account_name,
            opportunity_names,
            policy,
            ambiguity=settings.ambiguity,
        )
        uow.commit()
    log.info(
        f"Finished opportunity reconciliation for {account_name!r}: "
        f"created={result.created}, updated={result.updated}"
    )
    return result


def link_contacts(
    contacts: Iterable[Contact],
    *,
    derive_key: Callable[[Contact], str] = contact_last_name,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ReconciliationConfig | None = None,
) -> tuple[Contact, ...]:
    """Attach each contact to the account derived from it and persist the contacts."""

    settings = _settings(config)
    with _unit_of_work(unit_of_work_factory) as uow:
        linked = link_children_to_parents(
            uow.repositories.gateway,
            contacts,
            derive_key,
            ambiguity=settings.ambiguity,
        )
        uow.commit()
    return linked
