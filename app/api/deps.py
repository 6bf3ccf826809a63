from functools import lru_cache

from app.services.accrual import AccrualEngine
from app.services.customers import CustomerService
from app.services.enrollment import EnrollmentService
from app.services.notifications import NotificationService
from app.services.stats import StatsService
from app.services.wallets import PassCoordinator, create_pass_coordinator


@lru_cache
def get_pass_coordinator() -> PassCoordinator:
    """One coordinator per process so providers share their HTTP connection pools."""
    return create_pass_coordinator()


def get_enrollment_service() -> EnrollmentService:
    return EnrollmentService(wallets=get_pass_coordinator())


def get_accrual_engine() -> AccrualEngine:
    return AccrualEngine(wallets=get_pass_coordinator())


def get_customer_service() -> CustomerService:
    return CustomerService()


def get_notification_service() -> NotificationService:
    return NotificationService(wallets=get_pass_coordinator())


def get_stats_service() -> StatsService:
    return StatsService()
