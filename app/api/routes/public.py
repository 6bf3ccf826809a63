"""Public routes for customer-facing endpoints (no authentication required)."""

import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_enrollment_service
from app.domain.schemas import CustomerEnrollRequest, EnrollmentResponse, ErrorResponse
from app.services.enrollment import EnrollmentService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/customers/{business_id}",
    response_model=EnrollmentResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
def register_customer(
    business_id: str,
    data: CustomerEnrollRequest,
    service: EnrollmentService = Depends(get_enrollment_service),
):
    """
    Public customer registration endpoint.

    Issues the customer's wallet pass and creates their record, provided the
    business is still under its plan's customer limit.

    No authentication required - this is the public-facing customer signup.
    """
    enrolled = service.enroll(business_id, data, data.os_family)

    message = "Your loyalty card is ready. Add it to your wallet."
    if enrolled.limits_unknown:
        message += " (plan limits could not be verified)"

    return EnrollmentResponse(
        status="created",
        customer_id=enrolled.customer["id"],
        wallet_pass_url=enrolled.wallet_pass_url,
        limits_unknown=enrolled.limits_unknown,
        message=message,
    )
