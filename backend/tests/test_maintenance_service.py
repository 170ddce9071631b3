"""
Daily revenue reset tests.

Verifies:
- Every merchant and assistant in every organization/event is zeroed
- Writes are split into batches of the configured size
- Re-running is harmless
- The CLI command runs the same sweep
"""

import pytest

from bazaar.services import maintenance_service

from conftest import doc_path, read


@pytest.fixture
def second_org(seed):
    """Another organization with two events."""
    seed.set("organizations/org2", {"name": "Night Market"})
    seed.set("organizations/org2/events/e1", {"admins": []})
    seed.set("organizations/org2/events/e2", {"admins": []})
    seed.set(doc_path("merchants", "n1", "org2", "e1"), {
        "dailyRevenue": {"today": 999, "todayTransactionCount": 9, "todayOwnerCollected": 1, "todayAsistsCollected": 2,
                         "total": 5000},
    })
    seed.set(doc_path("merchants", "n2", "org2", "e2"), {"stallName": "no revenue yet"})
    seed.set(doc_path("users", "x1", "org2", "e2"), {
        "roles": ["merchantAsist", "customer"],
        "merchantAsist": {"statistics": {"todayCollected": 12, "todayTransactionCount": 3, "totalCollected": 70}},
    })
    seed.set(doc_path("users", "x2", "org2", "e2"), {"roles": ["customer"]})
    return seed


def _assert_merchant_reset(path):
    revenue = read(path)["dailyRevenue"]
    assert revenue["today"] == 0
    assert revenue["todayTransactionCount"] == 0
    assert revenue["todayOwnerCollected"] == 0
    assert revenue["todayAsistsCollected"] == 0
    assert revenue["lastResetAt"] is not None


class TestResetDailyRevenue:

    def test_resets_everything(self, second_org):
        summary = maintenance_service.reset_daily_revenue()

        assert summary["success"] is True
        assert summary["totalOrgs"] == 2
        assert summary["totalEvents"] == 3
        assert summary["totalMerchants"] == 4
        assert summary["totalAsists"] == 4

        for path in (
            doc_path("merchants", "m1"),
            doc_path("merchants", "m2"),
            doc_path("merchants", "n1", "org2", "e1"),
            doc_path("merchants", "n2", "org2", "e2"),
        ):
            _assert_merchant_reset(path)

        # Untouched fields survive
        assert read(doc_path("merchants", "n1", "org2", "e1"))["dailyRevenue"]["total"] == 5000
        assert read(doc_path("merchants", "n2", "org2", "e2"))["stallName"] == "no revenue yet"

        stats = read(doc_path("users", "x1", "org2", "e2"))["merchantAsist"]["statistics"]
        assert stats["todayCollected"] == 0
        assert stats["todayTransactionCount"] == 0
        assert stats["totalCollected"] == 70

        stats = read(doc_path("users", "asist1"))["merchantAsist"]["statistics"]
        assert stats["todayCollected"] == 0
        assert stats["totalCollected"] == 400

        assert "merchantAsist" not in read(doc_path("users", "x2", "org2", "e2"))

    def test_batches_respect_size(self, second_org):
        # evt1: 2 merchants + 3 assistants -> 3 batches of <=2
        # org2/e1: 1 merchant -> 1 batch; org2/e2: 1 merchant + 1 assistant -> 1 batch
        summary = maintenance_service.reset_daily_revenue(batch_size=2)
        assert summary["batchesCommitted"] == 5

    def test_default_batch_size_uses_one_batch_per_event(self, second_org):
        summary = maintenance_service.reset_daily_revenue()
        assert summary["batchesCommitted"] == 3

    def test_batch_size_is_capped(self, app):
        assert maintenance_service._resolve_batch_size(10_000) == 500
        with pytest.raises(ValueError):
            maintenance_service._resolve_batch_size(0)

    def test_rerun_is_harmless(self, second_org):
        maintenance_service.reset_daily_revenue()
        summary = maintenance_service.reset_daily_revenue()
        assert summary["totalMerchants"] == 4
        _assert_merchant_reset(doc_path("merchants", "m1"))

    def test_empty_store(self, store):
        summary = maintenance_service.reset_daily_revenue()
        assert summary["totalOrgs"] == 0
        assert summary["batchesCommitted"] == 0


class TestResetCommand:

    def test_cli_runs_reset(self, app, seed):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["maintenance", "reset-daily-revenue", "--batch-size", "2"])

        assert result.exit_code == 0, result.output
        assert "PASS Reset 2 merchants and 3 assistants" in result.output
        _assert_merchant_reset(doc_path("merchants", "m1"))

    def test_cli_rejects_bad_batch_size(self, app, seed):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["maintenance", "reset-daily-revenue", "--batch-size", "0"])
        assert result.exit_code != 0
