from fastapi import Depends, HTTPException, status

from app.core.security import require_auth
from app.repositories.business import BusinessRepository


class BusinessAccessContext:
    """Context object for an operator acting on one business."""

    def __init__(self, user_id: str, business: dict):
        self.user_id = user_id
        self.business = business
        self.business_id = business["id"]


def require_business_access(
    business_id: str,
    auth_payload: dict = Depends(require_auth),
) -> BusinessAccessContext:
    """Verify the authenticated user operates the business in the path.

    A business is operated by the account that registered it (owner_id is
    the Supabase auth subject).

    Example:
        @router.get("/{business_id}")
        def list_customers(ctx: BusinessAccessContext = Depends(require_business_access)):
            ...
    """
    user_id = auth_payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload: missing sub claim",
        )

    business = BusinessRepository.get_by_id(business_id)
    if not business:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")

    if str(business.get("owner_id")) != str(user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to this business",
        )

    return BusinessAccessContext(user_id=user_id, business=business)
