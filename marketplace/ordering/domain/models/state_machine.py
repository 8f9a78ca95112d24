"""
Order status lifecycle.

    PENDING -> CONFIRMED -> PREPARING -> READY -> ON_DELIVERY -> DELIVERED

CANCELLED is reachable from every non-terminal status. DELIVERED and
CANCELLED are terminal.
"""

from django.db import models

from marketplace.domain.errors import InvalidOrderStatus, InvalidPaymentStatus, InvalidStatusTransition


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    CONFIRMED = "CONFIRMED", "Confirmed"
    PREPARING = "PREPARING", "Preparing"
    READY = "READY", "Ready"
    ON_DELIVERY = "ON_DELIVERY", "On Delivery"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"


class PaymentStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PAID = "PAID", "Paid"
    FAILED = "FAILED", "Failed"


ORDER_STATUS_TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.ON_DELIVERY, OrderStatus.CANCELLED}),
    OrderStatus.ON_DELIVERY: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

# Line items may only change before the restaurant confirms.
EDITABLE_STATUSES = frozenset({OrderStatus.PENDING})


def parse_order_status(value) -> OrderStatus:
    """Accept an ``OrderStatus`` or its value in any case."""
    try:
        return OrderStatus(str(value).upper())
    except ValueError:
        raise InvalidOrderStatus(f"Unknown order status {value!r}. Must be one of: {', '.join(OrderStatus.values)}")


def parse_payment_status(value) -> PaymentStatus:
    try:
        return PaymentStatus(str(value).upper())
    except ValueError:
        raise InvalidPaymentStatus(
            f"Unknown payment status {value!r}. Must be one of: {', '.join(PaymentStatus.values)}"
        )


def can_transition(current, target) -> bool:
    return OrderStatus(target) in ORDER_STATUS_TRANSITIONS[OrderStatus(current)]


def validate_transition(current, target) -> None:
    """Raise ``InvalidStatusTransition`` unless ``current -> target`` is legal."""
    current = OrderStatus(current)
    target = OrderStatus(target)

    if current == OrderStatus.DELIVERED and target == OrderStatus.CANCELLED:
        raise InvalidStatusTransition(current, target, "delivered orders cannot be cancelled")

    if current in TERMINAL_STATUSES:
        raise InvalidStatusTransition(current, target, f"{current} is a terminal status")

    if not can_transition(current, target):
        raise InvalidStatusTransition(current, target)
