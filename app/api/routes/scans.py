from fastapi import APIRouter, Depends

from app.api.deps import get_accrual_engine
from app.core.permissions import require_business_access, BusinessAccessContext
from app.domain.loyalty import ScanMode
from app.domain.schemas import ErrorResponse, ScanRequest, ScanResponse
from app.services.accrual import AccrualEngine, AccrualResult

router = APIRouter()

SCAN_ERRORS = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


def _to_response(result: AccrualResult) -> ScanResponse:
    return ScanResponse(
        customer_id=result.customer_id,
        name=result.display_name,
        mode=result.mode.value,
        visits_total=result.visits_total,
        cycle_visits=result.cycle_visits,
        rewards_available=result.rewards_available,
        rewards_redeemed=result.rewards_redeemed,
        reward_earned=result.reward_earned,
        message=result.summary,
    )


@router.post("/{business_id}/visit", response_model=ScanResponse, responses=SCAN_ERRORS)
def register_visit(
    data: ScanRequest,
    ctx: BusinessAccessContext = Depends(require_business_access),
    engine: AccrualEngine = Depends(get_accrual_engine),
):
    """
    Register a visit for the customer whose card was scanned.

    The customer's wallet pass is updated before the visit is saved.
    """
    return _to_response(engine.process_scan(ctx.business_id, data.data, ScanMode.VISIT))


@router.post("/{business_id}/redeem", response_model=ScanResponse, responses=SCAN_ERRORS)
def redeem_reward(
    data: ScanRequest,
    ctx: BusinessAccessContext = Depends(require_business_access),
    engine: AccrualEngine = Depends(get_accrual_engine),
):
    """Redeem one available reward for the customer whose card was scanned."""
    return _to_response(engine.process_scan(ctx.business_id, data.data, ScanMode.REDEMPTION))
