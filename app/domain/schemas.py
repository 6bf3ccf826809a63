from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime


# ============================================
# Customer Schemas
# ============================================

class CustomerEnrollRequest(BaseModel):
    """Public enrollment form.

    Fields are optional at the schema level so missing values are reported
    as VALIDATION_ERROR by the enrollment service instead of a bare 422.
    """
    name: Optional[str] = None
    surname: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    os_family: Optional[str] = None  # "ios" | "android"


class CustomerResponse(BaseModel):
    id: str
    name: str
    surname: str
    email: str
    phone: str
    birth_date: Optional[date] = None
    os_family: str
    active: bool
    visits_total: int
    cycle_visits: int
    rewards_available: int
    rewards_redeemed: int
    wallet_pass_url: Optional[str] = None
    created_at: Optional[datetime] = None
    last_visit_at: Optional[datetime] = None


class EnrollmentResponse(BaseModel):
    status: str  # "created"
    customer_id: str
    wallet_pass_url: Optional[str] = None
    limits_unknown: bool = False
    message: str


# ============================================
# Scan Schemas
# ============================================

class ScanRequest(BaseModel):
    data: str  # Raw text decoded from the customer's QR code


class ScanResponse(BaseModel):
    customer_id: str
    name: str
    mode: str  # "visit" | "redemption"
    visits_total: int
    cycle_visits: int
    rewards_available: int
    rewards_redeemed: int
    reward_earned: bool
    message: str


# ============================================
# Notification Schemas
# ============================================

class NotificationRequest(BaseModel):
    message: str = Field(..., max_length=500)


class NotificationResponse(BaseModel):
    customer_id: str
    notifications_this_month: int
    limits_unknown: bool = False


# ============================================
# Business Schemas
# ============================================

class PlanLimitsResponse(BaseModel):
    plan_name: str
    max_customers: Optional[int] = None
    max_notifications_per_month: Optional[int] = None
    max_emails_per_month: Optional[int] = None
    price: Optional[float] = None


class UsageResponse(BaseModel):
    total_customers: int
    notifications_this_month: int
    emails_this_month: int
    month_key: str


class BusinessUsageResponse(BaseModel):
    limits: Optional[PlanLimitsResponse] = None
    limits_unknown: bool
    usage: UsageResponse
    at_user_limit: bool


class RecentEnrollment(BaseModel):
    customer_id: str
    name: str
    email: str
    created_at: Optional[datetime] = None


class DashboardStatsResponse(BaseModel):
    total_customers: int
    max_customers: Optional[int] = None
    at_user_limit: bool
    ios_customers: int
    android_customers: int
    new_this_week: int
    visited_today: int
    recent: List[RecentEnrollment] = []


class EnrollmentLinkResponse(BaseModel):
    business_id: str
    url: str


class ErrorDetail(BaseModel):
    code: str
    message: str
    retryable: bool = False


class ErrorResponse(BaseModel):
    detail: ErrorDetail
