"""
Payment store — the persistence capabilities the payment workflow needs.

The workflow only talks to a ``PaymentStore`` (find, create, count, aggregate),
so tests can hand it an in-memory fake instead of a database session.
``SqlAlchemyPaymentStore`` is the production implementation on top of an
``AsyncSession``; it flushes but never commits (routes own the transaction).
"""

from __future__ import annotations

from typing import Any, NamedTuple, Protocol, Sequence

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from db_models import Order, Payment
from models import PaymentFilters


class MethodTotal(NamedTuple):
    """One raw GROUP BY method row. Values may arrive as str/Decimal/None."""
    method: Any
    count: Any
    total_amount: Any


class PaymentStore(Protocol):
    async def get_order(self, order_id: int, *, for_update: bool = False) -> Any | None: ...

    async def get_payment(self, payment_id: int) -> Any | None: ...

    async def add_payment(self, **fields: Any) -> Any: ...

    async def find_payments(
        self,
        filters: PaymentFilters | None,
        *,
        limit: int,
        offset: int,
        sort_field: str,
        descending: bool,
    ) -> Sequence[Any]: ...

    async def count_payments(self, filters: PaymentFilters | None = None) -> Any: ...

    async def sum_amount(self, status: str) -> Any: ...

    async def method_totals(self, status: str) -> Sequence[MethodTotal]: ...

    async def recent_payments(self, limit: int) -> Sequence[Any]: ...


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _apply_filters(stmt, filters: PaymentFilters | None):
    if filters is None:
        return stmt
    if filters.status:
        stmt = stmt.where(Payment.status == filters.status)
    if filters.method:
        stmt = stmt.where(Payment.method == filters.method)
    if filters.order_id is not None:
        stmt = stmt.where(Payment.order_id == filters.order_id)
    if filters.search and filters.search.strip():
        term = f"%{escape_like(filters.search.strip())}%"
        stmt = stmt.where(
            or_(
                cast(Payment.order_id, String).ilike(term, escape="\\"),
                Payment.method.ilike(term, escape="\\"),
                cast(Payment.amount, String).ilike(term, escape="\\"),
            )
        )
    return stmt


class SqlAlchemyPaymentStore:
    """PaymentStore backed by the shared async SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_order(self, order_id: int, *, for_update: bool = False) -> Order | None:
        # FOR UPDATE holds the order row until the request commits (ignored by SQLite)
        stmt = select(Order).where(Order.id == order_id)
        if for_update:
            stmt = stmt.with_for_update()
        res = await self.db.execute(stmt)
        return res.scalar_one_or_none()

    async def get_payment(self, payment_id: int) -> Payment | None:
        res = await self.db.execute(
            select(Payment)
            .options(selectinload(Payment.order).selectinload(Order.customer))
            .where(Payment.id == payment_id)
            .execution_options(populate_existing=True)
        )
        return res.scalar_one_or_none()

    async def add_payment(self, **fields: Any) -> Payment:
        payment = Payment(**fields)
        self.db.add(payment)
        await self.db.flush()
        # Reload with the order/customer graph so callers never lazy-load
        return await self.get_payment(payment.id)

    async def find_payments(
        self,
        filters: PaymentFilters | None,
        *,
        limit: int,
        offset: int,
        sort_field: str,
        descending: bool,
    ) -> list[Payment]:
        column = getattr(Payment, sort_field)
        if descending:
            ordering = (column.desc(), Payment.id.desc())
        else:
            ordering = (column.asc(), Payment.id.asc())

        stmt = select(Payment).options(
            selectinload(Payment.order).selectinload(Order.customer)
        )
        stmt = (
            _apply_filters(stmt, filters)
            .order_by(*ordering)
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        res = await self.db.execute(stmt)
        return list(res.scalars().all())

    async def count_payments(self, filters: PaymentFilters | None = None) -> int:
        stmt = _apply_filters(select(func.count(Payment.id)), filters)
        res = await self.db.execute(stmt)
        return res.scalar() or 0

    async def sum_amount(self, status: str):
        res = await self.db.execute(
            select(func.sum(Payment.amount)).where(Payment.status == status)
        )
        return res.scalar()

    async def method_totals(self, status: str) -> list[MethodTotal]:
        res = await self.db.execute(
            select(
                Payment.method,
                func.count(Payment.id).label("count"),
                func.sum(Payment.amount).label("total_amount"),
            )
            .where(Payment.status == status)
            .group_by(Payment.method)
        )
        return [MethodTotal(row[0], row[1], row[2]) for row in res.all()]

    async def recent_payments(self, limit: int) -> list[Payment]:
        res = await self.db.execute(
            select(Payment)
            .options(selectinload(Payment.order))
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(res.scalars().all())
