"""Reconciliation defaults read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

from crmsync.domain.reconciliation.policy import DEFAULT_CLOSE_IN_MONTHS, AmbiguityPolicy

from .errors import ConfigurationError

AMBIGUITY_ENV_VAR = "CRMSYNC_AMBIGUITY"
CLOSE_IN_MONTHS_ENV_VAR = "CRMSYNC_CLOSE_IN_MONTHS"


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    ambiguity: AmbiguityPolicy = AmbiguityPolicy.FIRST
    close_in_months: int = DEFAULT_CLOSE_IN_MONTHS


def get_reconciliation_config() -> ReconciliationConfig:
    raw_ambiguity = os.getenv(AMBIGUITY_ENV_VAR, "").strip().lower()
    raw_months = os.getenv(CLOSE_IN_MONTHS_ENV_VAR, "").strip()

    ambiguity = AmbiguityPolicy.FIRST
    if raw_ambiguity:
        try:
            ambiguity = AmbiguityPolicy(raw_ambiguity)
        except ValueError as exc:
            choices = ", ".join(policy.value for policy in AmbiguityPolicy)
            raise ConfigurationError(
                f"{AMBIGUITY_ENV_VAR} must be one of: {choices} (got {raw_ambiguity!r})"
            ) from exc

    close_in_months = DEFAULT_CLOSE_IN_MONTHS
    if raw_months:
        try:
            close_in_months = int(raw_months)
        except ValueError as exc:
            raise ConfigurationError(
                f"{CLOSE_IN_MONTHS_ENV_VAR} must be an integer (got {raw_months!r})"
            ) from exc
        if close_in_months < 0:
            raise ConfigurationError(f"{CLOSE_IN_MONTHS_ENV_VAR} must be non-negative")

    return ReconciliationConfig(ambiguity=ambiguity, close_in_months=close_in_months)
