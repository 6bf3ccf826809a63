"""
Plan limits versus current usage for a business.

Used by the dashboard and settings pages to show usage against the plan.
The hard customer limit itself is enforced inside the enrollment
transaction, not here.
"""
from dataclasses import asdict
from typing import Optional

from app.services.counters import EnrollmentCounter
from app.services.plan_limits import PlanLimitResolver


def get_business_limits_and_usage(
    business_id: str,
    plans: Optional[PlanLimitResolver] = None,
    counter: Optional[EnrollmentCounter] = None,
) -> dict:
    """Get both limits and current usage for a business.

    Args:
        business_id: The business to check

    Returns:
        Dict with limits (None when unknown), limits_unknown, usage and
        at_user_limit
    """
    plans = plans or PlanLimitResolver()
    counter = counter or EnrollmentCounter()

    limits = plans.resolve_limit(business_id)
    usage = counter.get_usage(business_id)

    max_customers = limits.max_customers if limits else None
    return {
        "limits": asdict(limits) if limits else None,
        "limits_unknown": limits is None,
        "usage": usage,
        "at_user_limit": max_customers is not None and usage["total_customers"] >= max_customers,
    }
