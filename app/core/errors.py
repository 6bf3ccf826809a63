"""
Typed rejections returned by the enrollment, accrual and notification services.

Each rejection carries a stable reason code, the HTTP status the API layer
answers with, and whether retrying the whole operation from scratch is safe.
Services raise them; routes never catch them individually, the handler in
app/main.py renders every subclass the same way.
"""
from enum import Enum


class RejectionReason(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    LIMIT_REACHED = "LIMIT_REACHED"
    WALLET_PROVIDER_ERROR = "WALLET_PROVIDER_ERROR"
    WALLET_SYNC_FAILED = "WALLET_SYNC_FAILED"
    MALFORMED_PAYLOAD = "MALFORMED_PAYLOAD"
    TENANT_MISMATCH = "TENANT_MISMATCH"
    NOT_FOUND = "NOT_FOUND"
    INACTIVE = "INACTIVE"
    NO_REWARDS_AVAILABLE = "NO_REWARDS_AVAILABLE"
    NOTIFICATION_LIMIT_REACHED = "NOTIFICATION_LIMIT_REACHED"
    COMMIT_CONFLICT = "COMMIT_CONFLICT"


class LoyaltyError(Exception):
    """Base class for every rejection surfaced to the caller."""

    reason: RejectionReason
    status_code: int = 400
    retryable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict:
        return {
            "code": self.reason.value,
            "message": self.message,
            "retryable": self.retryable,
        }


class ValidationError(LoyaltyError):
    reason = RejectionReason.VALIDATION_ERROR
    status_code = 400


class LimitReached(LoyaltyError):
    """The business plan's customer quota is exhausted."""

    reason = RejectionReason.LIMIT_REACHED
    status_code = 403

    def __init__(self, limit: int):
        super().__init__(f"Your plan allows {limit} customers and the limit has been reached.")
        self.limit = limit


class WalletProviderError(LoyaltyError):
    reason = RejectionReason.WALLET_PROVIDER_ERROR
    status_code = 502
    retryable = True


class WalletSyncFailed(LoyaltyError):
    reason = RejectionReason.WALLET_SYNC_FAILED
    status_code = 502
    retryable = True


class MalformedPayload(LoyaltyError):
    reason = RejectionReason.MALFORMED_PAYLOAD
    status_code = 400


class TenantMismatch(LoyaltyError):
    reason = RejectionReason.TENANT_MISMATCH
    status_code = 403


class BusinessNotFound(LoyaltyError):
    reason = RejectionReason.NOT_FOUND
    status_code = 404


class CustomerNotFound(LoyaltyError):
    reason = RejectionReason.NOT_FOUND
    status_code = 404


class CustomerInactive(LoyaltyError):
    reason = RejectionReason.INACTIVE
    status_code = 409


class NoRewardsAvailable(LoyaltyError):
    reason = RejectionReason.NO_REWARDS_AVAILABLE
    status_code = 409


class NotificationLimitReached(LoyaltyError):
    reason = RejectionReason.NOTIFICATION_LIMIT_REACHED
    status_code = 403

    def __init__(self, limit: int):
        super().__init__(f"Your plan allows {limit} notifications per month and the limit has been reached.")
        self.limit = limit


class CommitConflict(LoyaltyError):
    """Concurrent scans kept winning the optimistic write for one customer."""

    reason = RejectionReason.COMMIT_CONFLICT
    status_code = 409
