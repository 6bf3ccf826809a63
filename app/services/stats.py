"""Dashboard statistics for a business."""

from datetime import datetime, timedelta
from typing import Callable, Optional

from app.core.clock import utcnow
from app.domain.loyalty import OS_ANDROID, OS_IOS, display_name
from app.repositories.customer import CustomerRepository
from app.services.counters import EnrollmentCounter
from app.services.customers import parse_timestamp, sort_customers
from app.services.plan_limits import PlanLimitResolver

RECENT_LIMIT = 5


def _after(value, threshold: datetime) -> bool:
    moment = parse_timestamp(value)
    if moment is None:
        return False
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=threshold.tzinfo)
    return moment > threshold


class StatsService:

    def __init__(
        self,
        customers=CustomerRepository,
        plans: Optional[PlanLimitResolver] = None,
        counter: Optional[EnrollmentCounter] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._customers = customers
        self._plans = plans or PlanLimitResolver()
        self._counter = counter or EnrollmentCounter(clock=clock)
        self._clock = clock

    def get_dashboard_stats(self, business_id: str) -> dict:
        """Headline numbers for the dashboard home.

        total_customers comes from the enrollment counter (deactivated
        customers still count); a business without a counter row falls back
        to counting records.
        """
        now = self._clock()
        customers = self._customers.get_all(business_id)

        counter = self._counter.get_usage(business_id)
        total = counter["total_customers"] or len(customers)

        limits = self._plans.resolve_limit(business_id)
        max_customers = limits.max_customers if limits else None

        week_ago = now - timedelta(days=7)
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)

        def os_count(family: str) -> int:
            return sum(1 for c in customers if (c.get("os_family") or "").lower() == family)

        recent = [
            {
                "customer_id": c["id"],
                "name": display_name(c),
                "email": c.get("email") or "",
                "created_at": parse_timestamp(c.get("created_at")),
            }
            for c in sort_customers(customers, "desc")[:RECENT_LIMIT]
        ]

        return {
            "total_customers": total,
            "max_customers": max_customers,
            "at_user_limit": max_customers is not None and total >= max_customers,
            "ios_customers": os_count(OS_IOS),
            "android_customers": os_count(OS_ANDROID),
            "new_this_week": sum(1 for c in customers if _after(c.get("created_at"), week_ago)),
            "visited_today": sum(1 for c in customers if _after(c.get("last_visit_at"), start_of_day)),
            "recent": recent,
        }
