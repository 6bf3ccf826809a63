"""
Plan limit resolution.

A business references its subscription plan by name. Limits come from the
plans table: exact name match first, then a case-insensitive match across
all plans. When nothing matches the limits are unknown, which callers must
treat as "do not block" and surface to the operator, never as unlimited.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.repositories.business import BusinessRepository
from app.repositories.plan import PlanRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanLimits:
    plan_name: str
    max_customers: Optional[int] = None  # None = not configured for this plan
    max_notifications_per_month: Optional[int] = None
    max_emails_per_month: Optional[int] = None
    price: Optional[float] = None

    @classmethod
    def from_record(cls, record: dict) -> "PlanLimits":
        return cls(
            plan_name=record.get("name") or "",
            max_customers=_as_limit(record.get("max_customers")),
            max_notifications_per_month=_as_limit(record.get("max_notifications_per_month")),
            max_emails_per_month=_as_limit(record.get("max_emails_per_month")),
            price=float(record["price"]) if record.get("price") is not None else None,
        )


def _as_limit(value) -> Optional[int]:
    """Plan limits are integers; anything else means the limit is not set."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


class PlanLimitResolver:

    def __init__(self, businesses=BusinessRepository, plans=PlanRepository):
        self._businesses = businesses
        self._plans = plans

    def find_plan(self, plan_name: str) -> dict | None:
        plan = self._plans.get_by_name(plan_name)
        if plan:
            return plan

        wanted = plan_name.strip().casefold()
        for candidate in self._plans.get_all():
            if (candidate.get("name") or "").strip().casefold() == wanted:
                return candidate
        return None

    def resolve_limit(self, business_id: str) -> PlanLimits | None:
        """Get the effective plan limits of a business.

        Returns:
            PlanLimits, or None when the limits are unknown (no business,
            no plan name, or no matching plan record).
        """
        return self.limits_for(business_id, self._businesses.get_by_id(business_id))

    def limits_for(self, business_id: str, business: dict | None) -> PlanLimits | None:
        """Same as resolve_limit, for a business record already loaded."""
        plan_name = (business or {}).get("plan_name")
        if not plan_name:
            logger.warning(f"Plan limits unknown for business {business_id}: no plan set")
            return None

        plan = self.find_plan(plan_name)
        if not plan:
            logger.warning(f"Plan limits unknown for business {business_id}: plan '{plan_name}' not found")
            return None

        return PlanLimits.from_record(plan)
