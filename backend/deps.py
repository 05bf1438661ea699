"""
Shared FastAPI dependencies.

Centralizes common dependencies so routers can import from a single place
(DB session, payment service, pagination).
"""

from __future__ import annotations

from typing import TypedDict

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from services.payment_service import PaymentService
from services.payment_store import SqlAlchemyPaymentStore


class Pagination(TypedDict):
    page: int
    limit: int


def pagination_params(
    page: int = Query(1, ge=1, le=100_000),
    limit: int = Query(settings.default_page_limit, ge=1, le=settings.max_page_limit),
) -> Pagination:
    return {"page": page, "limit": limit}


def get_payment_service(db: AsyncSession = Depends(get_db)) -> PaymentService:
    """
    Build the payment workflow for this request.

    The store wraps the request's session, so the route's commit covers the
    order check and the payment insert together. The duplicate policy is read
    per request so it can be changed without rebuilding the app.
    """
    return PaymentService(
        SqlAlchemyPaymentStore(db),
        duplicate_policy=settings.duplicate_payment_policy,
        recent_limit=settings.recent_payments_limit,
    )
