"""
Domain constants used across services/routers.
"""
from domain.enums import PaymentMethod

# Closed set of accepted payment methods, in display order
PAYMENT_METHODS = tuple(m.value for m in PaymentMethod)

# Bucket for missing / legacy / unknown method tags
FALLBACK_METHOD = PaymentMethod.CARD.value

MIN_PAYMENT_AMOUNT = 0.01
# Largest value a NUMERIC(10, 2) amount column can hold
MAX_PAYMENT_AMOUNT = 99_999_999.99

TRANSACTION_ID_PREFIX = "TXN"

# sortBy query values → Payment column names
SORTABLE_PAYMENT_FIELDS = {
    "id": "id",
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
    "amount": "amount",
    "method": "method",
    "status": "status",
    "orderId": "order_id",
    "order_id": "order_id",
}
DEFAULT_SORT_FIELD = "created_at"
