"""
Single-customer notifications shown on the wallet pass.

The monthly quota comes from the business plan. The check is made before
sending and the notification is counted after the provider acknowledged it,
so two simultaneous sends at the very edge of the quota can both go out.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.core.errors import (
    CustomerInactive,
    CustomerNotFound,
    NotificationLimitReached,
    ValidationError,
    WalletProviderError,
)
from app.repositories.customer import CustomerRepository
from app.services.counters import EnrollmentCounter, is_stale
from app.services.plan_limits import PlanLimitResolver
from app.services.wallets import PassCoordinator, WalletProviderCallError, create_pass_coordinator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationResult:
    customer_id: str
    notifications_this_month: int
    limits_unknown: bool


class NotificationService:

    def __init__(
        self,
        customers=CustomerRepository,
        plans: Optional[PlanLimitResolver] = None,
        counter: Optional[EnrollmentCounter] = None,
        wallets: Optional[PassCoordinator] = None,
    ):
        self._customers = customers
        self._plans = plans or PlanLimitResolver()
        self._counter = counter or EnrollmentCounter()
        self._wallets = wallets or create_pass_coordinator()

    def notify_customer(self, business_id: str, customer_id: str, message: str) -> NotificationResult:
        message = (message or "").strip()
        if not message:
            raise ValidationError("The notification message cannot be empty.")

        customer = self._customers.get(business_id, customer_id)
        if not customer:
            raise CustomerNotFound("Customer not found.")
        if not customer.get("active", True):
            raise CustomerInactive("This customer is deactivated.")

        counter = self._counter.reset_monthly_counters_if_stale(business_id)
        sent = 0
        if not is_stale(counter, self._counter.current_month_key()):
            sent = int(counter.get("notifications_this_month") or 0)

        limits = self._plans.resolve_limit(business_id)
        limit = limits.max_notifications_per_month if limits else None
        if limit is not None and sent >= limit:
            raise NotificationLimitReached(limit)

        try:
            self._wallets.for_customer(customer).notify(customer_id, message)
        except WalletProviderCallError as e:
            raise WalletProviderError("We couldn't send the notification right now. Please try again later.") from e

        total = self._counter.record_notification(business_id)
        logger.info(f"Notification sent to customer {customer_id} of business {business_id} ({total} this month)")
        return NotificationResult(
            customer_id=customer_id,
            notifications_this_month=total,
            limits_unknown=limits is None,
        )
