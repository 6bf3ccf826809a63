from datetime import datetime, timezone

import pytest

from app.core.clock import month_key
from app.core.errors import CommitConflict
from app.services.counters import EnrollmentCounter, effective_usage
from tests.fakes import FakeTenantCounterRepository, fixed_clock


def test_month_key_format() -> None:
    assert month_key(datetime(2026, 3, 1, tzinfo=timezone.utc)) == "2026-03"
    assert month_key(datetime(2025, 12, 31, tzinfo=timezone.utc)) == "2025-12"


class TestUsage:

    def test_stale_month_reads_as_zero(self) -> None:
        counter = {"total_customers": 7, "notifications_this_month": 3, "emails_this_month": 1, "month_key": "2026-02"}
        assert effective_usage(counter, "2026-03") == {
            "total_customers": 7,
            "notifications_this_month": 0,
            "emails_this_month": 0,
            "month_key": "2026-03",
        }

    def test_missing_row_reads_as_zero(self) -> None:
        assert effective_usage(None, "2026-03")["total_customers"] == 0

    def test_get_usage_does_not_write(self, counter: EnrollmentCounter, tenant_counters: FakeTenantCounterRepository) -> None:
        tenant_counters.seed("biz-1", total_customers=2, notifications_this_month=4, month_key="2026-01")
        assert counter.get_usage("biz-1")["notifications_this_month"] == 0
        assert tenant_counters.get("biz-1")["notifications_this_month"] == 4


class TestEnrollWithinLimit:

    def test_accepts_under_limit(self, counter: EnrollmentCounter, customers) -> None:
        result = counter.enroll_within_limit("biz-1", {"id": "c-1", "name": "Ana"}, 5)
        assert result.accepted
        assert result.total_customers == 1
        assert customers.get("biz-1", "c-1") is not None

    def test_rejects_at_limit_without_writing(self, counter: EnrollmentCounter, tenant_counters, customers) -> None:
        tenant_counters.seed("biz-1", total_customers=5, month_key="2026-03")
        result = counter.enroll_within_limit("biz-1", {"id": "c-1"}, 5)
        assert not result.accepted
        assert tenant_counters.get("biz-1")["total_customers"] == 5
        assert customers.get("biz-1", "c-1") is None

    def test_unknown_limit_never_rejects(self, counter: EnrollmentCounter, tenant_counters) -> None:
        tenant_counters.seed("biz-1", total_customers=10_000, month_key="2026-03")
        assert counter.enroll_within_limit("biz-1", {"id": "c-1"}, None).accepted

    def test_unexpected_outcome_raises(self) -> None:
        class Broken:
            def enroll_customer(self, *args):
                return {"status": "weird"}

        with pytest.raises(RuntimeError):
            EnrollmentCounter(counters=Broken(), clock=fixed_clock).enroll_within_limit("biz-1", {"id": "c"}, 1)


class TestMonthlyReset:

    def test_stale_row_is_reset(self, counter: EnrollmentCounter, tenant_counters) -> None:
        tenant_counters.seed("biz-1", total_customers=3, notifications_this_month=9, emails_this_month=2, month_key="2026-02")
        row = counter.reset_monthly_counters_if_stale("biz-1")
        assert row["month_key"] == "2026-03"
        assert row["notifications_this_month"] == 0
        assert row["emails_this_month"] == 0
        assert row["total_customers"] == 3

    def test_current_row_is_untouched(self, counter: EnrollmentCounter, tenant_counters) -> None:
        tenant_counters.seed("biz-1", notifications_this_month=2, month_key="2026-03")
        assert counter.reset_monthly_counters_if_stale("biz-1")["notifications_this_month"] == 2

    def test_row_without_month_is_reset(self, counter: EnrollmentCounter, tenant_counters) -> None:
        tenant_counters.seed("biz-1", notifications_this_month=2, month_key=None)
        assert counter.reset_monthly_counters_if_stale("biz-1")["month_key"] == "2026-03"

    def test_missing_row(self, counter: EnrollmentCounter) -> None:
        assert counter.reset_monthly_counters_if_stale("biz-1") is None


class TestRecordNotification:

    def test_creates_row_on_first_notification(self, counter: EnrollmentCounter, tenant_counters) -> None:
        assert counter.record_notification("biz-1") == 1
        assert tenant_counters.get("biz-1")["month_key"] == "2026-03"

    def test_counts_from_zero_in_a_new_month(self, counter: EnrollmentCounter, tenant_counters) -> None:
        tenant_counters.seed("biz-1", notifications_this_month=40, month_key="2026-02")
        assert counter.record_notification("biz-1") == 1

    def test_increments(self, counter: EnrollmentCounter, tenant_counters) -> None:
        tenant_counters.seed("biz-1", notifications_this_month=4, month_key="2026-03")
        assert counter.record_notification("biz-1") == 5

    def test_gives_up_when_counter_keeps_changing(self, tenant_counters) -> None:
        class Racing(FakeTenantCounterRepository):
            def increment_notifications(self, business_id, month_key, expected):
                return None

        racing = Racing(tenant_counters.customers)
        racing.seed("biz-1", month_key="2026-03")
        with pytest.raises(CommitConflict):
            EnrollmentCounter(counters=racing, clock=fixed_clock, max_attempts=3).record_notification("biz-1")
