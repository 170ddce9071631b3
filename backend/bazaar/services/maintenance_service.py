# Overview: Service-layer operations for maintenance; daily reset of merchant and assistant counters.

"""
Daily Revenue Reset

Runs once a day (00:00 Asia/Kuala_Lumpur). Walks every organization, every
event and every merchant, zeroing the "today" counters, then zeroes the
daily statistics of every user holding the merchantAsist tag.

Writes go out in batches of at most RESET_BATCH_SIZE documents, committed
one after another. There is no resume bookkeeping: a partial run leaves
some counters reset and some not, and a second run over already-zero
counters changes nothing that matters.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import current_app

from ..docstore import MAX_BATCH_WRITES, DocumentStore, WriteBatch
from ..extensions import documents
from ..permissions import Role
from ..time_utils import to_utc_z, utcnow

logger = logging.getLogger(__name__)


def merchant_reset_updates(now) -> dict[str, Any]:
    return {
        "dailyRevenue.today": 0,
        "dailyRevenue.todayTransactionCount": 0,
        "dailyRevenue.todayOwnerCollected": 0,
        "dailyRevenue.todayAsistsCollected": 0,
        "dailyRevenue.lastResetAt": now,
    }


def asist_reset_updates(now) -> dict[str, Any]:
    return {
        "merchantAsist.statistics.todayCollected": 0,
        "merchantAsist.statistics.todayTransactionCount": 0,
        "merchantAsist.statistics.lastResetAt": now,
    }


class BatchWriter:
    """Groups updates into batches of at most batch_size writes."""

    def __init__(self, store: DocumentStore, batch_size: int):
        self.store = store
        self.batch_size = batch_size
        self.batches_committed = 0
        self.writes_committed = 0
        self._batch: WriteBatch | None = None
        self._pending = 0

    def update(self, path: str, updates: dict[str, Any]) -> None:
        if self._batch is None:
            self._batch = self.store.batch()
        self._batch.update(path, updates)
        self._pending += 1
        if self._pending >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        if self._batch is None or self._pending == 0:
            return
        self.writes_committed += self._batch.commit()
        self.batches_committed += 1
        # A committed batch cannot be reused
        self._batch = None
        self._pending = 0


def _resolve_batch_size(batch_size: int | None) -> int:
    if batch_size is None:
        batch_size = current_app.config.get("RESET_BATCH_SIZE", MAX_BATCH_WRITES)
    batch_size = int(batch_size)
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    return min(batch_size, MAX_BATCH_WRITES)


def reset_daily_revenue(*, batch_size: int | None = None) -> dict[str, Any]:
    """Zero daily merchant and assistant counters across all tenants."""
    store = documents.store
    writer = BatchWriter(store, _resolve_batch_size(batch_size))
    now = utcnow()

    total_orgs = 0
    total_events = 0
    total_merchants = 0
    total_asists = 0

    logger.info("Daily revenue reset starting (batch size %d)", writer.batch_size)

    for org in store.list_documents("organizations"):
        total_orgs += 1

        for event in store.list_documents(f"{org.path}/events"):
            total_events += 1

            merchants = store.list_documents(f"{event.path}/merchants")
            for merchant in merchants:
                writer.update(merchant.path, merchant_reset_updates(now))
            total_merchants += len(merchants)

            asists = store.query(f"{event.path}/users", "roles", "array-contains", Role.MERCHANT_ASIST)
            for asist in asists:
                writer.update(asist.path, asist_reset_updates(now))
            total_asists += len(asists)

            writer.flush()
            logger.info(
                "Reset %s/%s: %d merchants, %d assistants",
                org.id, event.id, len(merchants), len(asists),
            )

    writer.flush()

    summary = {
        "success": True,
        "totalOrgs": total_orgs,
        "totalEvents": total_events,
        "totalMerchants": total_merchants,
        "totalAsists": total_asists,
        "batchesCommitted": writer.batches_committed,
        "timestamp": to_utc_z(now),
    }
    logger.info("Daily revenue reset finished: %s", summary)
    return summary
