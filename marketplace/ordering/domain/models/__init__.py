from .order import Order, OrderLineItem, compute_total
from .state_machine import (
    ORDER_STATUS_TRANSITIONS,
    TERMINAL_STATUSES,
    OrderStatus,
    PaymentStatus,
    can_transition,
    validate_transition,
)


__all__ = [
    "ORDER_STATUS_TRANSITIONS",
    "TERMINAL_STATUSES",
    "Order",
    "OrderLineItem",
    "OrderStatus",
    "PaymentStatus",
    "can_transition",
    "compute_total",
    "validate_transition",
]
