from __future__ import annotations

from datetime import date

import pytest

from crmsync import app as app_module
from crmsync.app import link_contacts, reconcile_opportunities, resolve_account
from crmsync.config import ReconciliationConfig
from crmsync.domain.errors import WriteRejectedError
from crmsync.domain.model import Account, Contact, Opportunity
from tests.helpers.gateway import FakeUnitOfWork


def test_reconcile_opportunities_commits_once(monkeypatch: pytest.MonkeyPatch) -> None:
    uow = FakeUnitOfWork()
    monkeypatch.setenv("CRMSYNC_CLOSE_IN_MONTHS", "1")
    monkeypatch.setattr(app_module, "load_environment", lambda: False)

    result = reconcile_opportunities(
        "Acme",
        ["Deal A", "Deal B", "Deal A"],
        today=date(2025, 1, 31),
        unit_of_work_factory=lambda: uow,
    )

    assert uow.committed == 1
    assert uow.rolled_back == 0
    assert len(result.children) == 2
    assert {o.close_date for o in uow.gateway.all(Opportunity)} == {date(2025, 2, 28)}


def test_reconcile_opportunities_loads_environment_without_explicit_config(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: list[bool] = []

    def fake_load_environment() -> bool:
        calls.append(True)
        return False

    monkeypatch.setattr(app_module, "load_environment", fake_load_environment)

    reconcile_opportunities("Acme", [], unit_of_work_factory=FakeUnitOfWork)

    assert calls == [True]


def test_explicit_config_skips_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail_load_environment() -> bool:
        raise AssertionError("environment should not be read")

    monkeypatch.setattr(app_module, "load_environment", fail_load_environment)

    account = resolve_account(
        "Acme", unit_of_work_factory=FakeUnitOfWork, config=ReconciliationConfig()
    )

    assert account.description == "New Account"


def test_link_contacts_rolls_back_and_reraises_on_rejection() -> None:
    uow = FakeUnitOfWork()
    uow.gateway.reject_writes = True

    with pytest.raises(WriteRejectedError):
        link_contacts(
            [Contact(last_name="Doe")],
            unit_of_work_factory=lambda: uow,
            config=ReconciliationConfig(),
        )

    assert uow.committed == 0
    assert uow.rolled_back == 1
    assert uow.gateway.all(Account) == []


def test_services_start_the_default_adapter_lazily(monkeypatch: pytest.MonkeyPatch) -> None:
    started: list[bool] = []
    uow = FakeUnitOfWork()

    monkeypatch.setattr(app_module, "is_started", lambda: False)
    monkeypatch.setattr(app_module, "startup", lambda: started.append(True))
    monkeypatch.setattr(app_module, "SqlAlchemyReconciliationUnitOfWork", lambda: uow)

    resolve_account("Acme", config=ReconciliationConfig())

    assert started == [True]
    assert uow.committed == 1
