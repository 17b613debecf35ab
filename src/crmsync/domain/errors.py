"""Reconciliation error taxonomy.

A missing match is never an error: an empty lookup result drives the create branch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from crmsync.domain.model import EntityKind


class ReconciliationError(RuntimeError):
    """Base class for failures surfaced by reconciliation operations."""


class AmbiguousMatchError(ReconciliationError):
    """Raised under the strict ambiguity policy when a natural key matches several records."""

    def __init__(self, kind: EntityKind, key: str, candidate_ids: Sequence[int | None]) -> None:
        self.kind = kind
        self.key = key
        self.candidate_ids = tuple(candidate_ids)
        ids = ", ".join(str(candidate_id) for candidate_id in self.candidate_ids)
        super().__init__(f"{len(self.candidate_ids)} {kind} records match {key!r} (ids: {ids})")


class WriteRejectedError(ReconciliationError):
    """Raised when the store refuses a batch write.

    Nothing from the rejected batch should be presumed persisted. Re-query before retrying:
    a blind retry after a partially applied batch can create duplicates.
    """
