from typing import List

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_customer_service, get_notification_service
from app.core.permissions import require_business_access, BusinessAccessContext
from app.domain.schemas import CustomerResponse, NotificationRequest, NotificationResponse
from app.services.customers import CustomerService
from app.services.notifications import NotificationService

router = APIRouter()


@router.get("/{business_id}", response_model=List[CustomerResponse])
def list_customers(
    search: str = "",
    os_family: str = Query("all", description="all, ios or android"),
    rewards: str = Query("all", description="all, with or without"),
    order: str = Query("desc", description="asc or desc by creation time"),
    ctx: BusinessAccessContext = Depends(require_business_access),
    service: CustomerService = Depends(get_customer_service),
):
    """List the business's customers, optionally filtered."""
    return service.list_customers(
        ctx.business_id,
        search=search,
        os_family=os_family,
        rewards=rewards,
        order=order,
    )


@router.get("/{business_id}/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: str,
    ctx: BusinessAccessContext = Depends(require_business_access),
    service: CustomerService = Depends(get_customer_service),
):
    return service.get_customer(ctx.business_id, customer_id)


@router.post("/{business_id}/{customer_id}/deactivate", response_model=CustomerResponse)
def deactivate_customer(
    customer_id: str,
    ctx: BusinessAccessContext = Depends(require_business_access),
    service: CustomerService = Depends(get_customer_service),
):
    """Deactivate a customer. Their scans are refused until reactivated."""
    return service.deactivate(ctx.business_id, customer_id)


@router.post("/{business_id}/{customer_id}/reactivate", response_model=CustomerResponse)
def reactivate_customer(
    customer_id: str,
    ctx: BusinessAccessContext = Depends(require_business_access),
    service: CustomerService = Depends(get_customer_service),
):
    return service.reactivate(ctx.business_id, customer_id)


@router.post("/{business_id}/{customer_id}/notify", response_model=NotificationResponse)
def notify_customer(
    customer_id: str,
    data: NotificationRequest,
    ctx: BusinessAccessContext = Depends(require_business_access),
    service: NotificationService = Depends(get_notification_service),
):
    """Send a message to the customer's wallet pass (counts towards the monthly quota)."""
    result = service.notify_customer(ctx.business_id, customer_id, data.message)
    return NotificationResponse(
        customer_id=result.customer_id,
        notifications_this_month=result.notifications_this_month,
        limits_unknown=result.limits_unknown,
    )
