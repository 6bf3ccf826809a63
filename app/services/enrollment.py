"""
Customer enrollment.

Order matters: the wallet pass is issued before anything is written, because
the remote pass service is the step most likely to fail. Only once it has
answered do we insert the customer and count it against the plan, in a single
transaction. If the plan limit is hit at that point the issued pass is simply
abandoned.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from email_validator import EmailNotValidError, validate_email

from app.core.clock import utcnow
from app.core.errors import BusinessNotFound, LimitReached, ValidationError, WalletProviderError
from app.domain.loyalty import INITIAL_COUNTERS
from app.repositories.business import BusinessRepository
from app.services.counters import EnrollmentCounter
from app.services.plan_limits import PlanLimitResolver
from app.services.wallets import PassCoordinator, WalletProviderCallError, create_pass_coordinator

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    ("name", "name"),
    ("surname", "surname"),
    ("email", "email"),
    ("phone", "phone"),
)


@dataclass(frozen=True)
class EnrolledCustomer:
    customer: dict
    wallet_pass_url: Optional[str]
    limits_unknown: bool


def _clean(value) -> str:
    return (value or "").strip()


def validate_customer_input(data, os_family: str | None, today: date) -> dict:
    """Check the enrollment form and return the normalized customer fields.

    Raises:
        ValidationError: a required field is blank, the email is malformed,
            the birth date is missing or in the future, or no OS was chosen
    """
    missing = [label for field, label in REQUIRED_FIELDS if not _clean(getattr(data, field, None))]
    if missing:
        raise ValidationError(f"Please fill in: {', '.join(missing)}.")

    email = _clean(data.email).lower()
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Please enter a valid email address.")

    os_family = _clean(os_family).lower()
    if not os_family:
        raise ValidationError("Select your phone system: iPhone or Android.")

    birth_date = getattr(data, "birth_date", None)
    if birth_date is None:
        raise ValidationError("Please select your birth date.")
    if birth_date > today:
        raise ValidationError("Birth date cannot be in the future.")

    return {
        "name": _clean(data.name),
        "surname": _clean(data.surname),
        "email": email,
        "phone": _clean(data.phone),
        "birth_date": birth_date.isoformat(),
        "os_family": os_family,
    }


class EnrollmentService:

    def __init__(
        self,
        businesses=BusinessRepository,
        plans: Optional[PlanLimitResolver] = None,
        counter: Optional[EnrollmentCounter] = None,
        wallets: Optional[PassCoordinator] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._businesses = businesses
        self._plans = plans or PlanLimitResolver(businesses=businesses)
        self._counter = counter or EnrollmentCounter(clock=clock)
        self._wallets = wallets or create_pass_coordinator()
        self._clock = clock

    def enroll(self, business_id: str, data, os_family: str | None) -> EnrolledCustomer:
        """Register a new customer of a business and issue their wallet pass.

        Args:
            business_id: Business the customer signs up with
            data: Enrollment form (name, surname, email, phone, birth_date)
            os_family: "ios", "android", or another OS label

        Raises:
            BusinessNotFound, ValidationError, WalletProviderError, LimitReached
        """
        business = self._businesses.get_by_id(business_id)
        if not business:
            raise BusinessNotFound("Business not found.")

        fields = validate_customer_input(data, os_family, self._clock().date())

        limits = self._plans.limits_for(business_id, business)
        max_customers = limits.max_customers if limits else None

        customer_id = str(uuid.uuid4())
        provider = self._wallets.for_os_family(fields["os_family"])
        display = f"{fields['name']} {fields['surname']}"

        try:
            reference = provider.create_pass(
                customer_id,
                display,
                fields["os_family"],
                first_name=fields["name"],
                last_name=fields["surname"],
            )
        except WalletProviderCallError as e:
            logger.warning(f"Enrollment for business {business_id} aborted, pass issuance failed: {e}")
            raise WalletProviderError(
                "We couldn't create your card right now. Please try again later."
            ) from e

        row = {
            "id": customer_id,
            **fields,
            "active": True,
            **INITIAL_COUNTERS.as_dict(),
            "wallet_pass_url": reference.url,
        }

        result = self._counter.enroll_within_limit(business_id, row, max_customers)
        if not result.accepted:
            logger.warning(
                f"Enrollment for business {business_id} rejected at limit {max_customers}; "
                f"{reference.provider} pass for {customer_id} discarded"
            )
            raise LimitReached(max_customers)

        logger.info(
            f"Created customer {customer_id} for business {business_id} "
            f"({result.total_customers} customers, {reference.provider} pass)"
        )
        return EnrolledCustomer(
            customer=result.customer or row,
            wallet_pass_url=reference.url,
            limits_unknown=limits is None,
        )
