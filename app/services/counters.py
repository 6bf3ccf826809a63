"""
Enrollment counter: per-business usage counters and plan-limit enforcement.

The customer quota is enforced in the database (enroll_customer SQL
function) so the limit check, the increment and the customer insert commit
together. Monthly message counters are reset lazily: whenever the counter row
is touched and its month_key is not the current month, the monthly counts
are zeroed first.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from app.core.clock import month_key, utcnow
from app.core.errors import CommitConflict
from app.repositories.tenant_counter import TenantCounterRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CounterResult:
    accepted: bool
    customer: Optional[dict] = None
    total_customers: Optional[int] = None


def is_stale(counter: dict | None, current_month: str) -> bool:
    return counter is None or counter.get("month_key") != current_month


def effective_usage(counter: dict | None, current_month: str) -> dict:
    """Usage as of current_month; stale monthly counts read as 0 without writing."""
    counter = counter or {}
    stale = is_stale(counter, current_month)
    return {
        "total_customers": int(counter.get("total_customers") or 0),
        "notifications_this_month": 0 if stale else int(counter.get("notifications_this_month") or 0),
        "emails_this_month": 0 if stale else int(counter.get("emails_this_month") or 0),
        "month_key": current_month,
    }


class EnrollmentCounter:

    def __init__(
        self,
        counters=TenantCounterRepository,
        clock: Callable[[], datetime] = utcnow,
        max_attempts: int = 5,
    ):
        self._counters = counters
        self._clock = clock
        self._max_attempts = max_attempts

    def current_month_key(self) -> str:
        return month_key(self._clock())

    def get_usage(self, business_id: str) -> dict:
        return effective_usage(self._counters.get(business_id), self.current_month_key())

    def enroll_within_limit(
        self,
        business_id: str,
        customer_row: dict,
        max_customers: int | None,
    ) -> CounterResult:
        """Insert customer_row and count it, unless the business is at max_customers.

        Both writes happen in one transaction; a rejected call writes nothing.
        """
        outcome = self._counters.enroll_customer(
            business_id,
            customer_row,
            max_customers,
            self.current_month_key(),
        ) or {}

        status = outcome.get("status")
        if status == "limit_reached":
            return CounterResult(accepted=False)
        if status != "accepted":
            raise RuntimeError(f"enroll_customer returned an unexpected outcome: {outcome!r}")

        return CounterResult(
            accepted=True,
            customer=outcome.get("customer"),
            total_customers=outcome.get("total_customers"),
        )

    def reset_monthly_counters_if_stale(self, business_id: str) -> dict | None:
        """Zero monthly counters if the stored month is not the current one.

        Returns the counter row as of the current month, or None if the
        business has no counter row yet.
        """
        current = self.current_month_key()
        counter = self._counters.get(business_id)
        if counter is None or not is_stale(counter, current):
            return counter

        stale_key = counter.get("month_key")
        updated = self._counters.reset_monthly_counters(business_id, stale_key, current)
        if updated is None:
            # Another request reset it first
            return self._counters.get(business_id)

        logger.info(f"Reset monthly counters for business {business_id} ({stale_key} -> {current})")
        return updated

    def record_notification(self, business_id: str) -> int:
        """Count one sent notification for the current month.

        Returns the new monthly count.
        """
        current = self.current_month_key()
        for _ in range(self._max_attempts):
            counter = self.reset_monthly_counters_if_stale(business_id)
            if counter is None:
                self._counters.create(business_id, current)
                continue

            if counter.get("month_key") != current:
                continue

            expected = int(counter.get("notifications_this_month") or 0)
            updated = self._counters.increment_notifications(business_id, current, expected)
            if updated is not None:
                return int(updated["notifications_this_month"])

        logger.warning(f"Could not record notification for business {business_id}: counter kept changing")
        raise CommitConflict("Notification counter is busy. Try again.")
