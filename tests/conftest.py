"""Pytest configuration and fixtures."""

import pytest

from app.services.accrual import AccrualEngine
from app.services.counters import EnrollmentCounter
from app.services.customers import CustomerService
from app.services.enrollment import EnrollmentService
from app.services.notifications import NotificationService
from app.services.plan_limits import PlanLimitResolver
from app.services.stats import StatsService
from app.services.wallets import PassCoordinator
from tests.fakes import (
    FakeBusinessRepository,
    FakeCustomerRepository,
    FakePlanRepository,
    FakeTenantCounterRepository,
    FakeWalletProvider,
    fixed_clock,
)


@pytest.fixture
def businesses() -> FakeBusinessRepository:
    return FakeBusinessRepository([
        {"id": "biz-1", "name": "Cafe Uno", "owner_id": "owner-1", "plan_name": "Basic"},
        {"id": "biz-2", "name": "Cafe Dos", "owner_id": "owner-2", "plan_name": "basic"},
        {"id": "biz-free", "name": "No Plan", "owner_id": "owner-3", "plan_name": None},
    ])


@pytest.fixture
def plans() -> FakePlanRepository:
    return FakePlanRepository([
        {"name": "Basic", "max_customers": 5, "max_notifications_per_month": 2, "max_emails_per_month": 10, "price": 9.0},
        {"name": "Pro", "max_customers": 500, "max_notifications_per_month": 100, "max_emails_per_month": 1000, "price": 29.0},
    ])


@pytest.fixture
def customers() -> FakeCustomerRepository:
    return FakeCustomerRepository()


@pytest.fixture
def tenant_counters(customers) -> FakeTenantCounterRepository:
    return FakeTenantCounterRepository(customers)


@pytest.fixture
def apple() -> FakeWalletProvider:
    return FakeWalletProvider("apple", uses_embedded_counters=True)


@pytest.fixture
def google() -> FakeWalletProvider:
    return FakeWalletProvider("google", uses_embedded_counters=False)


@pytest.fixture
def wallets(apple, google) -> PassCoordinator:
    return PassCoordinator(apple=apple, google=google)


@pytest.fixture
def resolver(businesses, plans) -> PlanLimitResolver:
    return PlanLimitResolver(businesses=businesses, plans=plans)


@pytest.fixture
def counter(tenant_counters) -> EnrollmentCounter:
    return EnrollmentCounter(counters=tenant_counters, clock=fixed_clock)


@pytest.fixture
def enrollment(businesses, resolver, counter, wallets) -> EnrollmentService:
    return EnrollmentService(businesses=businesses, plans=resolver, counter=counter, wallets=wallets, clock=fixed_clock)


@pytest.fixture
def engine(customers, wallets) -> AccrualEngine:
    return AccrualEngine(customers=customers, wallets=wallets, clock=fixed_clock, max_commit_attempts=3)


@pytest.fixture
def customer_service(customers) -> CustomerService:
    return CustomerService(customers=customers)


@pytest.fixture
def notifications(customers, resolver, counter, wallets) -> NotificationService:
    return NotificationService(customers=customers, plans=resolver, counter=counter, wallets=wallets)


@pytest.fixture
def stats(customers, resolver, counter) -> StatsService:
    return StatsService(customers=customers, plans=resolver, counter=counter, clock=fixed_clock)
