"""
Payment endpoints — list, lookup, record, and statistics.

Every handler converts unexpected failures into an InternalError carrying an
operation-specific message; domain errors pass through to the handlers in
main.py unchanged.
"""
import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from deps import Pagination, get_payment_service, pagination_params
from domain.errors import DomainError, InternalError, ValidationError
from domain.responses import success_response
from models import PaymentCreateRequest, PaymentFilters
from services.payment_service import PaymentService, parse_order_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


# ── GET /payments ───────────────────────────────────────────────────

@router.get("")
async def list_payments(
    pagination: Pagination = Depends(pagination_params),
    status_filter: str | None = Query(None, alias="status"),
    payment_method: str | None = Query(None, alias="paymentMethod"),
    order_id: str | None = Query(None, alias="orderId"),
    search: str | None = Query(None, max_length=100),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("DESC", alias="sortOrder"),
    service: PaymentService = Depends(get_payment_service),
):
    """
    List payments with filtering, sorting and page-based pagination.

    Each payment carries its order summary and the order's customer.
    """
    # Empty orderId means no filter
    order_filter = None
    if order_id is not None and order_id.strip():
        order_filter = parse_order_id(order_id)
        if order_filter is None:
            raise ValidationError([{"field": "orderId", "message": "Order ID must be an integer"}])

    filters = PaymentFilters(
        status=status_filter,
        method=payment_method,
        order_id=order_filter,
        search=search,
    )
    try:
        result = await service.list_payments(
            filters,
            page=pagination["page"],
            limit=pagination["limit"],
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching payments: {e}", exc_info=True)
        raise InternalError("Failed to fetch payments", error=str(e))

    return success_response(data=result.to_api())


# ── GET /payments/stats/overview ───────────────────────────────────

@router.get("/stats/overview")
async def get_payment_stats(service: PaymentService = Depends(get_payment_service)):
    """Totals, per-method breakdown and the most recent payments."""
    try:
        stats = await service.get_stats()
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching payment statistics: {e}", exc_info=True)
        raise InternalError("Failed to fetch payment statistics", error=str(e))

    return success_response(data=stats.to_api())


# ── GET /payments/{payment_id} ─────────────────────────────────────

@router.get("/{payment_id}")
async def get_payment(
    payment_id: int,
    service: PaymentService = Depends(get_payment_service),
):
    try:
        payment = await service.get_payment(payment_id)
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching payment {payment_id}: {e}", exc_info=True)
        raise InternalError("Failed to fetch payment", error=str(e))

    return success_response(data=payment.to_api())


# ── POST /payments ──────────────────────────────────────────────────

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_payment(
    request: PaymentCreateRequest,
    service: PaymentService = Depends(get_payment_service),
    db: AsyncSession = Depends(get_db),
):
    """
    Record a completed payment against an order.

    The order's status is not changed; staff mark orders PAID separately.
    """
    try:
        payment = await service.create_payment(
            request.order_id,
            request.amount,
            request.method,
            notes=request.notes,
        )
        await db.commit()
    except DomainError:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating payment: {e}", exc_info=True)
        raise InternalError("Failed to process payment", error=str(e))

    return success_response(data=payment.to_api(), message="Payment processed successfully")
