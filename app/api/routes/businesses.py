from fastapi import APIRouter, Depends

from app.api.deps import get_stats_service
from app.core.config import get_enrollment_link
from app.core.entitlements import get_business_limits_and_usage
from app.core.permissions import require_business_access, BusinessAccessContext
from app.domain.schemas import BusinessUsageResponse, DashboardStatsResponse, EnrollmentLinkResponse
from app.services.stats import StatsService

router = APIRouter()


@router.get("/{business_id}/usage", response_model=BusinessUsageResponse)
def get_usage(ctx: BusinessAccessContext = Depends(require_business_access)):
    """Plan limits and this month's usage."""
    return get_business_limits_and_usage(ctx.business_id)


@router.get("/{business_id}/stats", response_model=DashboardStatsResponse)
def get_stats(
    ctx: BusinessAccessContext = Depends(require_business_access),
    service: StatsService = Depends(get_stats_service),
):
    return service.get_dashboard_stats(ctx.business_id)


@router.get("/{business_id}/enrollment-link", response_model=EnrollmentLinkResponse)
def get_link(ctx: BusinessAccessContext = Depends(require_business_access)):
    """Public signup URL, typically rendered as a QR code at the counter."""
    return EnrollmentLinkResponse(business_id=ctx.business_id, url=get_enrollment_link(ctx.business_id))
