"""
Pydantic models for request/response validation.

Responses are serialized with camelCase aliases (``orderId``, ``tableNumber``,
``totalAmount``) to match what the dashboard frontend reads.
"""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Shared base — camelCase aliases, construction by Python name or alias, ORM reads."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ── Order / Customer summaries ──────────────────────────────────────

class CustomerSummary(ApiModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class OrderBrief(ApiModel):
    """Order fields shown next to recent payments."""
    id: int
    table_number: Optional[int] = None
    total: float


class OrderSummary(OrderBrief):
    """Order fields shown next to listed payments, with the order's customer."""
    status: str
    customer: Optional[CustomerSummary] = None


# ── Payments ────────────────────────────────────────────────────────

class PaymentBase(ApiModel):
    id: int
    order_id: int
    amount: float
    method: Optional[str] = None
    status: str
    transaction_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaymentRead(PaymentBase):
    order: Optional[OrderSummary] = None


class RecentPayment(PaymentBase):
    order: Optional[OrderBrief] = None


class PaymentCreateRequest(ApiModel):
    """
    Body of POST /payments.

    orderId, amount and method are taken as sent. The service validator parses
    them, so wrong types, missing values and range/enum failures are all
    reported in one error list.
    """
    order_id: Any = None
    amount: Any = None
    method: Any = None
    notes: Optional[str] = Field(default=None, max_length=1000)


# ── Listing ─────────────────────────────────────────────────────────

class PaymentFilters(ApiModel):
    """Conjunctive listing filters; None means "don't filter"."""
    status: Optional[str] = None
    method: Optional[str] = None
    order_id: Optional[int] = None
    search: Optional[str] = None


class Pagination(ApiModel):
    total: int
    page: int
    limit: int
    pages: int


class PaymentPage(ApiModel):
    payments: List[PaymentRead]
    pagination: Pagination


# ── Statistics ──────────────────────────────────────────────────────

class MethodStat(ApiModel):
    method: str
    count: int = 0
    total_amount: float = 0.0


class PaymentStats(ApiModel):
    total_payments: int
    completed_payments: int
    pending_payments: int
    total_amount: float
    method_stats: List[MethodStat]
    cash_payments: int = 0
    card_payments: int = 0
    upi_payments: int = 0
    netbanking_payments: int = 0
    recent_payments: List[RecentPayment] = Field(default_factory=list)
