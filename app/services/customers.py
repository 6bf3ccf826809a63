"""Customer administration for the business dashboard."""

import logging
from datetime import datetime, timezone

from app.core.errors import CustomerNotFound, ValidationError
from app.repositories.customer import CustomerRepository

logger = logging.getLogger(__name__)

OS_FILTERS = ("all", "ios", "android")
REWARD_FILTERS = ("all", "with", "without")
SORT_ORDERS = ("asc", "desc")


def parse_timestamp(value) -> datetime | None:
    """Accept datetimes or ISO strings as returned by PostgREST."""
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def _sort_key(customer: dict) -> float:
    created = parse_timestamp(customer.get("created_at"))
    if created is None:
        return 0.0
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.timestamp()


def filter_customers(
    customers: list[dict],
    search: str = "",
    os_family: str = "all",
    rewards: str = "all",
) -> list[dict]:
    term = (search or "").strip().lower()

    def matches(customer: dict) -> bool:
        if term:
            haystack = (
                customer.get("name"),
                customer.get("surname"),
                customer.get("email"),
                customer.get("id"),
            )
            if not any(term in (value or "").lower() for value in haystack):
                return False

        if os_family != "all" and (customer.get("os_family") or "").lower() != os_family:
            return False

        available = int(customer.get("rewards_available") or 0)
        if rewards == "with" and available <= 0:
            return False
        if rewards == "without" and available > 0:
            return False
        return True

    return [c for c in customers if matches(c)]


def sort_customers(customers: list[dict], order: str = "desc") -> list[dict]:
    """Order by creation time; records without one sort as oldest."""
    return sorted(customers, key=_sort_key, reverse=(order == "desc"))


class CustomerService:

    def __init__(self, customers=CustomerRepository):
        self._customers = customers

    def list_customers(
        self,
        business_id: str,
        search: str = "",
        os_family: str = "all",
        rewards: str = "all",
        order: str = "desc",
    ) -> list[dict]:
        if os_family not in OS_FILTERS:
            raise ValidationError(f"os_family must be one of: {', '.join(OS_FILTERS)}.")
        if rewards not in REWARD_FILTERS:
            raise ValidationError(f"rewards must be one of: {', '.join(REWARD_FILTERS)}.")
        if order not in SORT_ORDERS:
            raise ValidationError(f"order must be one of: {', '.join(SORT_ORDERS)}.")

        customers = self._customers.get_all(business_id)
        return sort_customers(filter_customers(customers, search, os_family, rewards), order)

    def get_customer(self, business_id: str, customer_id: str) -> dict:
        customer = self._customers.get(business_id, customer_id)
        if not customer:
            raise CustomerNotFound("Customer not found.")
        return customer

    def set_active(self, business_id: str, customer_id: str, active: bool) -> dict:
        """Deactivate or reactivate a customer.

        Idempotent. Loyalty counters and the business's customer count are
        left as they are; a reactivated customer resumes their progress.
        """
        customer = self.get_customer(business_id, customer_id)
        if bool(customer.get("active", True)) == active:
            return customer

        updated = self._customers.set_active(business_id, customer_id, active)
        if not updated:
            raise CustomerNotFound("Customer not found.")

        logger.info(f"Customer {customer_id} of business {business_id} {'reactivated' if active else 'deactivated'}")
        return updated

    def deactivate(self, business_id: str, customer_id: str) -> dict:
        return self.set_active(business_id, customer_id, False)

    def reactivate(self, business_id: str, customer_id: str) -> dict:
        return self.set_active(business_id, customer_id, True)
