"""
Test doubles and data helpers.

InMemoryPaymentStore implements the PaymentStore protocol over plain lists so
the workflow can be exercised without a database. With ``stringify_aggregates``
it hands back COUNT/SUM results as strings, the way some SQL drivers do.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from itertools import count
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from models import PaymentFilters
from services.payment_store import MethodTotal


@dataclass
class FakeCustomer:
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


@dataclass
class FakeOrder:
    id: int
    total: float
    status: str = "PENDING"
    table_number: Optional[int] = None
    customer: Optional[FakeCustomer] = None


@dataclass
class FakePayment:
    id: int
    order_id: int
    amount: Any
    method: Any
    status: str
    transaction_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    order: Optional[FakeOrder] = None


class InMemoryPaymentStore:
    def __init__(self, *, stringify_aggregates: bool = False):
        self.orders: dict[int, FakeOrder] = {}
        self.payments: list[FakePayment] = []
        self.locked_orders: list[int] = []
        self.stringify_aggregates = stringify_aggregates
        self._ids = count(1)
        self._clock = datetime(2024, 1, 1, 9, 0, 0)

    # ── seeding ──

    def add_order(self, order_id: int, total: float = 100.0, status: str = "PENDING", **kwargs) -> FakeOrder:
        order = FakeOrder(id=order_id, total=total, status=status, **kwargs)
        self.orders[order_id] = order
        return order

    def seed_payment(self, order_id: int, amount: Any = 100.0, method: Any = "cash", status: str = "completed") -> FakePayment:
        """Insert a row as-is (legacy/unknown methods allowed), one second after the previous."""
        self._clock += timedelta(seconds=1)
        payment = FakePayment(
            id=next(self._ids),
            order_id=order_id,
            amount=amount,
            method=method,
            status=status,
            created_at=self._clock,
            updated_at=self._clock,
            order=self.orders.get(order_id),
        )
        self.payments.append(payment)
        return payment

    def _agg(self, value):
        return str(value) if self.stringify_aggregates and value is not None else value

    @staticmethod
    def _matches(payment: FakePayment, filters: PaymentFilters | None) -> bool:
        if filters is None:
            return True
        if filters.status and payment.status != filters.status:
            return False
        if filters.method and payment.method != filters.method:
            return False
        if filters.order_id is not None and payment.order_id != filters.order_id:
            return False
        if filters.search and filters.search.strip():
            term = filters.search.strip().lower()
            haystack = [str(payment.order_id), str(payment.method or "").lower(), str(payment.amount)]
            if not any(term in h for h in haystack):
                return False
        return True

    # ── PaymentStore ──

    async def get_order(self, order_id: int, *, for_update: bool = False):
        if for_update:
            self.locked_orders.append(order_id)
        return self.orders.get(order_id)

    async def get_payment(self, payment_id: int):
        return next((p for p in self.payments if p.id == payment_id), None)

    async def add_payment(self, **fields):
        self._clock += timedelta(seconds=1)
        payment = FakePayment(
            id=next(self._ids),
            created_at=self._clock,
            updated_at=self._clock,
            order=self.orders.get(fields["order_id"]),
            **fields,
        )
        self.payments.append(payment)
        return payment

    async def find_payments(self, filters, *, limit, offset, sort_field, descending):
        rows = [p for p in self.payments if self._matches(p, filters)]

        def key(p):
            value = getattr(p, sort_field)
            return (value is None, value, p.id)

        rows.sort(key=key, reverse=descending)
        return rows[offset:offset + limit]

    async def count_payments(self, filters=None):
        return self._agg(sum(1 for p in self.payments if self._matches(p, filters)))

    async def sum_amount(self, status):
        amounts = [float(p.amount) for p in self.payments if p.status == status]
        return self._agg(sum(amounts)) if amounts else None

    async def method_totals(self, status):
        groups: dict[Any, list[float]] = {}
        for p in self.payments:
            if p.status == status:
                groups.setdefault(p.method, []).append(float(p.amount))
        return [
            MethodTotal(method, self._agg(len(amounts)), self._agg(sum(amounts)))
            for method, amounts in groups.items()
        ]

    async def recent_payments(self, limit):
        rows = sorted(self.payments, key=lambda p: (p.created_at, p.id), reverse=True)
        return rows[:limit]


async def make_payment(
    db: AsyncSession,
    order_id: int,
    *,
    amount: float = 100.0,
    method: str | None = "cash",
    status: str = "completed",
    created_at: datetime | None = None,
):
    """Insert a payment row directly, bypassing the workflow (legacy data, bulk seeding)."""
    from db_models import Payment

    payment = Payment(
        order_id=order_id,
        amount=amount,
        method=method,
        status=status,
        created_at=created_at or datetime.utcnow(),
    )
    db.add(payment)
    await db.flush()
    return payment
