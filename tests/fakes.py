"""In-memory stand-ins for the Supabase repositories and the wallet services.

They keep the same contracts as the real ones: enroll_customer checks the
limit and inserts under one lock, update_counters is a compare-and-set on
version, and every update returns None when its filter matched nothing.
"""

import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from app.domain.loyalty import LoyaltyCounters
from app.services.wallets import WalletProvider, WalletProviderCallError, WalletReference

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return NOW


class FakeBusinessRepository:

    def __init__(self, businesses: Optional[list[dict]] = None):
        self.businesses = {b["id"]: dict(b) for b in businesses or []}

    def get_by_id(self, business_id: str) -> dict | None:
        business = self.businesses.get(business_id)
        return dict(business) if business else None


class FakePlanRepository:

    def __init__(self, plans: Optional[list[dict]] = None):
        self.plans = [dict(p) for p in plans or []]

    def get_by_name(self, name: str) -> dict | None:
        for plan in self.plans:
            if plan.get("name") == name:
                return dict(plan)
        return None

    def get_all(self) -> list[dict]:
        return sorted((dict(p) for p in self.plans), key=lambda p: p.get("name") or "")


class FakeCustomerRepository:

    def __init__(self):
        self.rows: dict[str, dict] = {}
        self.reads = 0
        self.writes = 0
        self._lock = threading.Lock()
        # Called right before a compare-and-set, to simulate a concurrent writer
        self.before_update: Optional[Callable[[str], None]] = None

    def add(self, **fields) -> dict:
        row = {
            "id": "cust-1",
            "business_id": "biz-1",
            "name": "Ana",
            "surname": "Lopez",
            "email": "ana@example.com",
            "phone": "+34600000000",
            "birth_date": "1990-05-01",
            "os_family": "android",
            "active": True,
            "visits_total": 1,
            "cycle_visits": 1,
            "rewards_available": 0,
            "rewards_redeemed": 0,
            "wallet_pass_url": None,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "last_visit_at": None,
            "version": 1,
        }
        row.update(fields)
        with self._lock:
            self.rows[row["id"]] = row
        return dict(row)

    def insert(self, business_id: str, row: dict) -> dict:
        with self._lock:
            stored = {
                "created_at": datetime.now(timezone.utc).isoformat(),
                "last_visit_at": None,
                "version": 1,
                **row,
                "business_id": business_id,
            }
            self.rows[stored["id"]] = stored
            return dict(stored)

    def get(self, business_id: str, customer_id: str) -> dict | None:
        with self._lock:
            self.reads += 1
            row = self.rows.get(customer_id)
            if row is None or row["business_id"] != business_id:
                return None
            return dict(row)

    def get_all(self, business_id: str) -> list[dict]:
        with self._lock:
            self.reads += 1
            rows = [dict(r) for r in self.rows.values() if r["business_id"] == business_id]
        return sorted(rows, key=lambda r: r.get("created_at") or "", reverse=True)

    def update_counters(
        self,
        business_id: str,
        customer_id: str,
        expected_version: int,
        counters: dict,
        last_visit_at: datetime,
    ) -> dict | None:
        if self.before_update is not None:
            self.before_update(customer_id)
        with self._lock:
            row = self.rows.get(customer_id)
            if row is None or row["business_id"] != business_id or row["version"] != expected_version:
                return None
            row.update(counters)
            row["last_visit_at"] = last_visit_at.isoformat()
            row["version"] = expected_version + 1
            self.writes += 1
            return dict(row)

    def set_active(self, business_id: str, customer_id: str, active: bool) -> dict | None:
        with self._lock:
            row = self.rows.get(customer_id)
            if row is None or row["business_id"] != business_id:
                return None
            row["active"] = active
            self.writes += 1
            return dict(row)


class FakeTenantCounterRepository:

    def __init__(self, customers: FakeCustomerRepository):
        self.customers = customers
        self.rows: dict[str, dict] = {}
        self._lock = threading.Lock()

    def seed(self, business_id: str, **fields) -> dict:
        row = {
            "business_id": business_id,
            "total_customers": 0,
            "notifications_this_month": 0,
            "emails_this_month": 0,
            "month_key": None,
        }
        row.update(fields)
        self.rows[business_id] = row
        return dict(row)

    def get(self, business_id: str) -> dict | None:
        with self._lock:
            row = self.rows.get(business_id)
            return dict(row) if row else None

    def enroll_customer(self, business_id: str, customer: dict, max_customers: int | None, month_key: str) -> dict:
        with self._lock:
            row = self.rows.setdefault(business_id, {
                "business_id": business_id,
                "total_customers": 0,
                "notifications_this_month": 0,
                "emails_this_month": 0,
                "month_key": month_key,
            })
            if max_customers is not None and row["total_customers"] >= max_customers:
                return {"status": "limit_reached"}

            stored = self.customers.insert(business_id, customer)
            row["total_customers"] += 1
            if row["month_key"] != month_key:
                row.update(notifications_this_month=0, emails_this_month=0, month_key=month_key)
            return {"status": "accepted", "total_customers": row["total_customers"], "customer": stored}

    def reset_monthly_counters(self, business_id: str, stale_month_key: str | None, month_key: str) -> dict | None:
        with self._lock:
            row = self.rows.get(business_id)
            if row is None or row["month_key"] != stale_month_key:
                return None
            row.update(notifications_this_month=0, emails_this_month=0, month_key=month_key)
            return dict(row)

    def increment_notifications(self, business_id: str, month_key: str, expected: int) -> dict | None:
        with self._lock:
            row = self.rows.get(business_id)
            if row is None or row["month_key"] != month_key or row["notifications_this_month"] != expected:
                return None
            row["notifications_this_month"] = expected + 1
            return dict(row)

    def create(self, business_id: str, month_key: str) -> dict | None:
        with self._lock:
            if business_id in self.rows:
                return None
            self.rows[business_id] = {
                "business_id": business_id,
                "total_customers": 0,
                "notifications_this_month": 0,
                "emails_this_month": 0,
                "month_key": month_key,
            }
            return dict(self.rows[business_id])


class FakeWalletProvider(WalletProvider):
    """Records every call; set fail=True to make the next calls raise."""

    def __init__(self, name: str, uses_embedded_counters: bool):
        super().__init__(base_url="http://wallet.test")
        self.name = name
        self.uses_embedded_counters = uses_embedded_counters
        self.fail = False
        self.created: list[str] = []
        self.synced: list[tuple[str, LoyaltyCounters, int]] = []
        self.refreshed: list[tuple[str, LoyaltyCounters]] = []
        self.reverted: list[tuple[str, LoyaltyCounters, int]] = []
        self.notified: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def _check(self):
        if self.fail:
            raise WalletProviderCallError(f"{self.name} wallet service answered 503: unavailable", status_code=503)

    def create_pass(self, customer_id, display_name, os_family, *, first_name="", last_name=""):
        self._check()
        with self._lock:
            self.created.append(customer_id)
        return WalletReference(provider=self.name, url=f"https://{self.name}.test/pass/{customer_id}")

    def notify(self, customer_id, message):
        self._check()
        self.notified.append((customer_id, message))

    def sync_scan(self, customer_id, counters, points_delta):
        self._check()
        self.synced.append((customer_id, counters, points_delta))

    def refresh_counters(self, customer_id, counters):
        if self.uses_embedded_counters:
            self._check()
            self.refreshed.append((customer_id, counters))

    def revert_scan(self, customer_id, counters, points_delta):
        self._check()
        self.reverted.append((customer_id, counters, points_delta))
