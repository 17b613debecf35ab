from __future__ import annotations

import os
from pathlib import Path

import pytest

from crmsync.config import (
    ConfigurationError,
    get_database_config,
    get_reconciliation_config,
    get_storage_config,
    load_environment,
)
from crmsync.domain.reconciliation import AmbiguityPolicy


def test_load_environment_reads_dotenv_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("CRMSYNC_DOTENV_CHECK", raising=False)
    dotenv = tmp_path / ".env"
    dotenv.write_text("CRMSYNC_DOTENV_CHECK=loaded\n")

    assert load_environment(dotenv) is True
    assert os.getenv("CRMSYNC_DOTENV_CHECK") == "loaded"
    monkeypatch.delenv("CRMSYNC_DOTENV_CHECK")


def test_load_environment_does_not_override_by_default(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("CRMSYNC_DOTENV_CHECK", "from-env")
    dotenv = tmp_path / ".env"
    dotenv.write_text("CRMSYNC_DOTENV_CHECK=from-file\n")

    load_environment(dotenv)

    assert os.getenv("CRMSYNC_DOTENV_CHECK") == "from-env"


def test_reconciliation_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CRMSYNC_AMBIGUITY", raising=False)
    monkeypatch.delenv("CRMSYNC_CLOSE_IN_MONTHS", raising=False)

    config = get_reconciliation_config()

    assert config.ambiguity is AmbiguityPolicy.FIRST
    assert config.close_in_months == 3


def test_reconciliation_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CRMSYNC_AMBIGUITY", "STRICT")
    monkeypatch.setenv("CRMSYNC_CLOSE_IN_MONTHS", "6")

    config = get_reconciliation_config()

    assert config.ambiguity is AmbiguityPolicy.STRICT
    assert config.close_in_months == 6


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("CRMSYNC_AMBIGUITY", "random"),
        ("CRMSYNC_CLOSE_IN_MONTHS", "three"),
        ("CRMSYNC_CLOSE_IN_MONTHS", "-1"),
    ],
)
def test_reconciliation_config_rejects_invalid_values(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError, match=name):
        get_reconciliation_config()


def test_storage_config_respects_data_dir_override(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    data_dir = tmp_path / "data"
    monkeypatch.setenv("CRMSYNC_DATA_DIR", str(data_dir))

    uri = get_storage_config().database_uri()

    assert uri == f"sqlite+pysqlite:///{data_dir.resolve() / 'crmsync.db'}"
    assert data_dir.is_dir()


def test_storage_config_defaults_to_xdg_data_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("CRMSYNC_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert get_storage_config().data_dir == tmp_path / "crmsync"


def test_database_config_prefers_explicit_uri(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")

    assert get_database_config().uri == "sqlite+pysqlite:///:memory:"


def test_database_config_falls_back_to_storage(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("CRMSYNC_DATA_DIR", str(tmp_path))

    uri = get_database_config().uri

    assert uri == f"sqlite+pysqlite:///{tmp_path.resolve() / 'crmsync.db'}"
