"""
Payment service — records payments against orders and summarizes them.

Workflow rules:
  - A payment needs an existing order that is not already PAID (any case).
  - New payments are stored as "completed"; the order's status is left alone,
    staff move orders to PAID by hand.
  - Stats group completed payments by *normalized* method, so null, legacy
    and unknown method tags all land in the "card" bucket.
  - Aggregates are coerced to int/float here; SQL drivers may hand back
    strings or Decimals for COUNT/SUM.
"""

from __future__ import annotations

import logging
import math
import random
import re
import time
from decimal import Decimal
from typing import Any, Iterable

from domain.constants import (
    DEFAULT_SORT_FIELD,
    FALLBACK_METHOD,
    MAX_PAYMENT_AMOUNT,
    MIN_PAYMENT_AMOUNT,
    PAYMENT_METHODS,
    SORTABLE_PAYMENT_FIELDS,
    TRANSACTION_ID_PREFIX,
)
from domain.enums import DuplicatePaymentPolicy, OrderStatus, PaymentStatus
from domain.errors import ConflictError, NotFoundError, ValidationError
from domain.responses import pagination_meta
from models import (
    MethodStat,
    Pagination,
    PaymentFilters,
    PaymentPage,
    PaymentRead,
    PaymentStats,
    RecentPayment,
)
from services.payment_store import MethodTotal, PaymentStore

logger = logging.getLogger(__name__)


# ── Pure helpers ────────────────────────────────────────────────────

def normalize_method(value: Any) -> str:
    """
    Map a raw method tag onto one of the four display buckets.

    Anything that is not a non-empty string, or is not a known method once
    lower-cased, becomes "card".
    """
    if not isinstance(value, str) or not value:
        return FALLBACK_METHOD
    lowered = value.lower()
    return lowered if lowered in PAYMENT_METHODS else FALLBACK_METHOD


def is_order_paid(status: Any) -> bool:
    return isinstance(status, str) and status.upper() == OrderStatus.PAID.value


def _field_error(field: str, message: str) -> dict:
    return {"field": field, "message": message}


_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def parse_order_id(value: Any) -> int | None:
    """
    Read an order id from a raw JSON value.

    Accepts ints, integral floats and integer strings ("42", "+42").
    Booleans and everything else give None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and _INT_RE.match(value.strip()):
        return int(value.strip())
    return None


def parse_amount(value: Any) -> float | None:
    """Read a finite amount from a number or numeric string; None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        amount = float(value)
    elif isinstance(value, str) and _FLOAT_RE.match(value.strip()):
        amount = float(value.strip())
    else:
        return None
    return amount if math.isfinite(amount) else None


def validate_payment_input(order_id: Any, amount: Any, method: Any) -> list[dict]:
    """
    Check the create-payment fields as they arrived in the request body.

    Returns one error entry per failing field (empty list when valid) so the
    caller can report every problem at once.
    """
    errors = []
    if parse_order_id(order_id) is None:
        errors.append(_field_error("orderId", "Order ID is required"))
    parsed_amount = parse_amount(amount)
    if parsed_amount is None or parsed_amount < MIN_PAYMENT_AMOUNT:
        errors.append(_field_error("amount", "Amount must be greater than 0"))
    elif parsed_amount > MAX_PAYMENT_AMOUNT:
        errors.append(_field_error("amount", f"Amount must not exceed {MAX_PAYMENT_AMOUNT:.2f}"))
    if not isinstance(method, str) or method not in PAYMENT_METHODS:
        errors.append(_field_error("method", "Invalid payment method"))
    return errors


def generate_transaction_id() -> str:
    """TXN<epoch ms><0-999>. For tracing only; uniqueness is not guaranteed."""
    return f"{TRANSACTION_ID_PREFIX}{int(time.time() * 1000)}{random.randint(0, 999)}"


def resolve_sort(sort_by: str | None, sort_order: str | None) -> tuple[str, bool]:
    """Translate sortBy/sortOrder query values into (column name, descending)."""
    field = SORTABLE_PAYMENT_FIELDS.get(sort_by or "", None)
    if field is None:
        if sort_by:
            logger.debug(f"Unsupported sortBy '{sort_by}', falling back to {DEFAULT_SORT_FIELD}")
        field = DEFAULT_SORT_FIELD
    descending = (sort_order or "DESC").upper() != "ASC"
    return field, descending


def as_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, str):
        return int(float(value))
    return int(value)


def as_float(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    return float(value)


def merge_method_totals(rows: Iterable[MethodTotal]) -> list[MethodStat]:
    """
    Re-bucket raw per-method GROUP BY rows by normalized method.

    Two raw groups (e.g. NULL and "CARD") can collapse into one bucket, so
    counts and amounts are summed per normalized key. Buckets come back in
    PAYMENT_METHODS order and only when they have rows.
    """
    buckets: dict[str, MethodStat] = {}
    for row in rows:
        key = normalize_method(row.method)
        bucket = buckets.setdefault(key, MethodStat(method=key))
        bucket.count += as_int(row.count)
        bucket.total_amount += as_float(row.total_amount)

    merged = []
    for method in PAYMENT_METHODS:
        if method in buckets:
            bucket = buckets[method]
            bucket.total_amount = round(bucket.total_amount, 2)
            merged.append(bucket)
    return merged


# ── Workflow ────────────────────────────────────────────────────────

class PaymentService:
    """Payment recording, listing, lookup and statistics over a PaymentStore."""

    def __init__(
        self,
        store: PaymentStore,
        *,
        duplicate_policy: DuplicatePaymentPolicy | str = DuplicatePaymentPolicy.ALLOW,
        recent_limit: int = 5,
    ):
        self.store = store
        self.duplicate_policy = DuplicatePaymentPolicy(duplicate_policy)
        self.recent_limit = recent_limit

    async def create_payment(
        self,
        order_id: Any,
        amount: Any,
        method: Any,
        notes: str | None = None,
    ) -> PaymentRead:
        """
        Record a completed payment for an order.

        Raises:
            ValidationError: bad orderId / amount / method (all listed)
            NotFoundError: order does not exist
            ConflictError: order already PAID, or a completed payment exists
                and the duplicate policy is "reject"
        """
        errors = validate_payment_input(order_id, amount, method)
        if errors:
            fields = ", ".join(e["field"] for e in errors)
            logger.info(f"Payment rejected: invalid {fields}")
            raise ValidationError(errors)

        order_id = parse_order_id(order_id)
        amount = parse_amount(amount)

        order = await self.store.get_order(order_id, for_update=True)
        if order is None:
            raise NotFoundError("Order", order_id)

        if is_order_paid(order.status):
            logger.info(f"Payment rejected: order {order_id} is already paid")
            raise ConflictError("Order is already paid")

        if self.duplicate_policy is DuplicatePaymentPolicy.REJECT:
            existing = await self.store.count_payments(
                PaymentFilters(order_id=order_id, status=PaymentStatus.COMPLETED.value)
            )
            if as_int(existing) > 0:
                logger.info(f"Payment rejected: order {order_id} already has a completed payment")
                raise ConflictError("Order already has a completed payment")

        transaction_id = generate_transaction_id()
        payment = await self.store.add_payment(
            order_id=order_id,
            amount=amount,
            method=method,
            status=PaymentStatus.COMPLETED.value,
            transaction_id=transaction_id,
            notes=notes,
        )
        logger.info(
            f"💳 Payment {payment.id} recorded: order={order_id} "
            f"amount={amount:.2f} method={method} txn={transaction_id}"
        )
        return PaymentRead.model_validate(payment)

    async def list_payments(
        self,
        filters: PaymentFilters | None = None,
        *,
        page: int = 1,
        limit: int = 50,
        sort_by: str | None = "createdAt",
        sort_order: str | None = "DESC",
    ) -> PaymentPage:
        page = max(1, page)
        limit = max(1, limit)
        offset = (page - 1) * limit
        sort_field, descending = resolve_sort(sort_by, sort_order)

        items = await self.store.find_payments(
            filters,
            limit=limit,
            offset=offset,
            sort_field=sort_field,
            descending=descending,
        )
        # Count ignores the page window
        total = as_int(await self.store.count_payments(filters))

        return PaymentPage(
            payments=[PaymentRead.model_validate(p) for p in items],
            pagination=Pagination(**pagination_meta(total, page, limit)),
        )

    async def get_payment(self, payment_id: int) -> PaymentRead:
        payment = await self.store.get_payment(payment_id)
        if payment is None:
            raise NotFoundError("Payment", payment_id)
        return PaymentRead.model_validate(payment)

    async def get_stats(self) -> PaymentStats:
        completed = PaymentStatus.COMPLETED.value

        total_payments = as_int(await self.store.count_payments())
        completed_payments = as_int(
            await self.store.count_payments(PaymentFilters(status=completed))
        )
        pending_payments = as_int(
            await self.store.count_payments(PaymentFilters(status=PaymentStatus.PENDING.value))
        )
        total_amount = round(as_float(await self.store.sum_amount(completed)), 2)

        method_stats = merge_method_totals(await self.store.method_totals(completed))
        counts = {s.method: s.count for s in method_stats}

        recent = await self.store.recent_payments(self.recent_limit)

        return PaymentStats(
            total_payments=total_payments,
            completed_payments=completed_payments,
            pending_payments=pending_payments,
            total_amount=total_amount,
            method_stats=method_stats,
            cash_payments=counts.get("cash", 0),
            card_payments=counts.get("card", 0),
            upi_payments=counts.get("upi", 0),
            netbanking_payments=counts.get("netbanking", 0),
            recent_payments=[RecentPayment.model_validate(p) for p in recent],
        )
