# Overview: Service-layer operations for guarded transitions; read, check, mutate in one transaction.

"""
Guarded State Transition

Every mutating operation follows the same shape:

1. read the target document inside a transaction (NotFound if absent)
2. read the one optional secondary document (NotFound if absent)
3. evaluate preconditions in order; the first violation raises its error
4. build the mutation from what was read (None means nothing to do)
5. write target updates, the appended audit entry and the secondary updates
   together at commit

Conflicting concurrent commits make the store re-run steps 1-5; this layer
never retries on its own. A transition touches at most two documents.

Status values only move along fixed edges: pending -> confirmed and
pending -> cancelled. Terminal states never change again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Sequence, Type

from ..docstore import Snapshot, Transaction, get_field
from ..errors import FailedPrecondition, NotFound, ServiceError
from ..extensions import documents
from ..time_utils import utcnow

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"

ALLOWED_STATUS_EDGES = frozenset({
    (STATUS_PENDING, STATUS_CONFIRMED),
    (STATUS_PENDING, STATUS_CANCELLED),
})


@dataclass(frozen=True)
class Precondition:
    """
    One guard on a document field.

    message may use {field}, {expected} and {actual} placeholders. The
    default reads "status must be pending, was cancelled".
    """
    field: str
    predicate: Callable[[Any], bool]
    expected: str
    message: Optional[str] = None
    error: Type[ServiceError] = FailedPrecondition

    def check(self, snapshot: Snapshot) -> None:
        actual = get_field(snapshot.data, self.field)
        if self.predicate(actual):
            return
        template = self.message or "{field} must be {expected}, was {actual}"
        raise self.error(template.format(field=self.field, expected=self.expected, actual=actual))


def field_equals(field_path: str, expected: Any, message: str | None = None,
                 error: Type[ServiceError] = FailedPrecondition) -> Precondition:
    return Precondition(field_path, lambda actual: actual == expected, str(expected), message, error)


def status_is(expected: str, message: str | None = None) -> Precondition:
    return field_equals("status", expected, message)


def positive_number(field_path: str, message: str | None = None) -> Precondition:
    def _check(actual):
        return isinstance(actual, (int, float)) and not isinstance(actual, bool) and actual > 0
    return Precondition(field_path, _check, "a positive number", message)


@dataclass
class Mutation:
    """Field updates for the target plus an optional entry appended to history_field."""
    updates: dict[str, Any]
    audit: Optional[dict[str, Any]] = None
    history_field: str = "statusHistory"


@dataclass
class SecondaryEffect:
    """
    The one other document a transition may touch.

    build_updates(target, secondary, now) runs after both reads, so values
    derived from the secondary's current state (counters, lists) are
    computed from the transactional read.
    """
    path: str
    build_updates: Callable[[Snapshot, Snapshot, datetime], dict[str, Any]]
    preconditions: Sequence[Precondition] = ()
    missing_message: str = "关联文档不存在"


@dataclass
class TransitionResult:
    path: str
    changed: bool
    before: dict[str, Any]
    updates: dict[str, Any] = field(default_factory=dict)
    secondary_updates: dict[str, Any] = field(default_factory=dict)
    committed_at: Optional[datetime] = None


MutationBuilder = Callable[[Snapshot, Optional[Snapshot], datetime], Optional[Mutation]]


def check_status_edge(before: dict[str, Any], updates: dict[str, Any]) -> None:
    if "status" not in updates:
        return
    edge = (before.get("status"), updates["status"])
    if edge not in ALLOWED_STATUS_EDGES:
        raise FailedPrecondition(f"status cannot move from {edge[0]} to {edge[1]}")


def run_guarded_transition(
    path: str,
    *,
    preconditions: Sequence[Precondition],
    build_mutation: MutationBuilder,
    secondary: SecondaryEffect | None = None,
    missing_message: str = "文档不存在",
) -> TransitionResult:
    """Run one guarded transition atomically and return what was written."""

    def _txn(txn: Transaction) -> TransitionResult:
        now = utcnow()

        target = txn.get(path)
        if not target.exists:
            raise NotFound(missing_message)

        secondary_snapshot = None
        if secondary is not None:
            secondary_snapshot = txn.get(secondary.path)
            if not secondary_snapshot.exists:
                raise NotFound(secondary.missing_message)

        for precondition in preconditions:
            precondition.check(target)
        if secondary is not None:
            for precondition in secondary.preconditions:
                precondition.check(secondary_snapshot)

        mutation = build_mutation(target, secondary_snapshot, now)
        if mutation is None:
            return TransitionResult(path=path, changed=False, before=target.data)

        updates = dict(mutation.updates)
        check_status_edge(target.data, updates)

        if mutation.audit is not None:
            entry = dict(mutation.audit)
            entry.setdefault("timestamp", now)
            history = get_field(target.data, mutation.history_field)
            history = list(history) if isinstance(history, list) else []
            history.append(entry)
            updates[mutation.history_field] = history

        secondary_updates = {}
        if secondary is not None:
            secondary_updates = secondary.build_updates(target, secondary_snapshot, now)

        txn.update(path, updates)
        if secondary_updates:
            txn.update(secondary.path, secondary_updates)

        return TransitionResult(
            path=path,
            changed=True,
            before=target.data,
            updates=updates,
            secondary_updates=secondary_updates,
            committed_at=now,
        )

    result = documents.store.run_transaction(_txn)
    if result.changed:
        logger.info("Transition committed on %s (%d fields)", path, len(result.updates))
    return result
