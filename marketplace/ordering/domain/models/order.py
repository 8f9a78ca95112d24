import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Optional, Tuple

from django.utils import timezone

from marketplace.domain.errors import (
    EmptyOrder,
    InvalidQuantity,
    InvalidStateError,
    LineItemNotFound,
    OrderNotEditable,
    ValidationError,
)
from marketplace.domain.value_objects import Address, Money

from .state_machine import (
    EDITABLE_STATUSES,
    OrderStatus,
    PaymentStatus,
    parse_order_status,
    parse_payment_status,
    validate_transition,
)


def _validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantity(f"Quantity must be a positive integer, got {quantity!r}")
    return quantity


@dataclass(frozen=True)
class OrderLineItem:
    """A product snapshot inside an order. ``unit_price`` is copied at order time."""

    product_ref: str
    unit_price: Money
    quantity: int
    notes: Optional[str] = None

    def __post_init__(self):
        _validate_quantity(self.quantity)

    @property
    def line_total(self) -> Money:
        return self.unit_price.multiply(self.quantity)

    def to_dict(self) -> dict:
        return {
            "product_ref": self.product_ref,
            "unit_price": self.unit_price.to_dict(),
            "quantity": self.quantity,
            "notes": self.notes,
            "line_total": self.line_total.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OrderLineItem":
        price = data["unit_price"]
        return cls(
            product_ref=data["product_ref"],
            unit_price=Money(price["amount"], price["currency"]),
            quantity=data["quantity"],
            notes=data.get("notes"),
        )


def compute_total(items: Tuple[OrderLineItem, ...]) -> Money:
    """Sum of line totals in the currency of the first item."""
    if not items:
        raise EmptyOrder()
    return Money.total((item.line_total for item in items), items[0].unit_price.currency)


@dataclass(frozen=True)
class Order:
    """
    Immutable order snapshot.

    Every mutation returns a new ``Order`` with ``total_price`` recomputed from
    the line items and a fresh ``updated_at``. ``version`` is owned by the
    store and is only bumped by a successful compare-and-swap.
    """

    id: str
    customer_ref: str
    restaurant_ref: str
    items: Tuple[OrderLineItem, ...]
    total_price: Money
    delivery_address: Address
    payment_method: str
    status: str = OrderStatus.PENDING
    payment_status: str = PaymentStatus.PENDING
    estimated_delivery_time: Optional[datetime] = None
    actual_delivery_time: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=timezone.now)
    updated_at: datetime = field(default_factory=timezone.now)
    version: int = 0

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))
        if not self.items:
            raise EmptyOrder()
        expected_total = compute_total(self.items)
        if self.total_price != expected_total:
            raise ValidationError(
                f"Order {self.id} total {self.total_price} does not match its line items ({expected_total})"
            )
        object.__setattr__(self, "status", parse_order_status(self.status))
        object.__setattr__(self, "payment_status", parse_payment_status(self.payment_status))

    @classmethod
    def place(
        cls,
        customer_ref: str,
        restaurant_ref: str,
        items: Iterable[OrderLineItem],
        delivery_address: Address,
        payment_method: str,
        notes: Optional[str] = None,
        order_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "Order":
        """Build a new PENDING order. Raises ``EmptyOrder`` or ``CurrencyMismatch``."""
        items = tuple(items)
        now = now or timezone.now()
        return cls(
            id=order_id or str(uuid.uuid4()),
            customer_ref=customer_ref,
            restaurant_ref=restaurant_ref,
            items=items,
            total_price=compute_total(items),
            delivery_address=delivery_address,
            payment_method=payment_method,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

    @property
    def currency(self) -> str:
        return self.total_price.currency

    @property
    def is_terminal(self) -> bool:
        return self.status in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    # ===== Status =====

    def transition_to(self, new_status, now: Optional[datetime] = None) -> "Order":
        new_status = parse_order_status(new_status)
        validate_transition(self.status, new_status)

        now = now or timezone.now()
        changes = {"status": new_status, "updated_at": now}
        if new_status == OrderStatus.DELIVERED:
            changes["actual_delivery_time"] = now
        return replace(self, **changes)

    def cancel(self, now: Optional[datetime] = None) -> "Order":
        return self.transition_to(OrderStatus.CANCELLED, now)

    def update_payment_status(self, payment_status, now: Optional[datetime] = None) -> "Order":
        payment_status = parse_payment_status(payment_status)
        if self.status == OrderStatus.CANCELLED:
            raise InvalidStateError(f"Cannot update payment status of cancelled order {self.id}")
        return replace(self, payment_status=payment_status, updated_at=now or timezone.now())

    def set_estimated_delivery_time(self, estimated: datetime, now: Optional[datetime] = None) -> "Order":
        if self.is_terminal:
            raise OrderNotEditable(self.id, self.status, action="set the delivery estimate of")
        return replace(self, estimated_delivery_time=estimated, updated_at=now or timezone.now())

    # ===== Line items =====

    def _require_editable(self, action: str) -> None:
        if self.status not in EDITABLE_STATUSES:
            raise OrderNotEditable(self.id, self.status, action=action)

    def _with_items(self, items: Tuple[OrderLineItem, ...], now: Optional[datetime]) -> "Order":
        if not items:
            raise EmptyOrder("Cannot remove the last item of an order; cancel it instead")
        return replace(self, items=items, total_price=compute_total(items), updated_at=now or timezone.now())

    def add_item(self, item: OrderLineItem, now: Optional[datetime] = None) -> "Order":
        self._require_editable("add items to")
        return self._with_items(self.items + (item,), now)

    def remove_item(self, product_ref: str, now: Optional[datetime] = None) -> "Order":
        """Drop every line for ``product_ref``."""
        self._require_editable("remove items from")
        remaining = tuple(item for item in self.items if item.product_ref != product_ref)
        if len(remaining) == len(self.items):
            raise LineItemNotFound(self.id, product_ref)
        return self._with_items(remaining, now)

    def update_item_quantity(self, product_ref: str, quantity: int, now: Optional[datetime] = None) -> "Order":
        """Change the quantity of the first line for ``product_ref``."""
        self._require_editable("change item quantities of")
        _validate_quantity(quantity)

        items = list(self.items)
        for index, item in enumerate(items):
            if item.product_ref == product_ref:
                items[index] = replace(item, quantity=quantity)
                return self._with_items(tuple(items), now)
        raise LineItemNotFound(self.id, product_ref)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_ref": self.customer_ref,
            "restaurant_ref": self.restaurant_ref,
            "items": [item.to_dict() for item in self.items],
            "total_price": self.total_price.to_dict(),
            "delivery_address": self.delivery_address.to_dict(),
            "payment_method": self.payment_method,
            "status": str(self.status),
            "payment_status": str(self.payment_status),
            "estimated_delivery_time": (
                self.estimated_delivery_time.isoformat() if self.estimated_delivery_time else None
            ),
            "actual_delivery_time": self.actual_delivery_time.isoformat() if self.actual_delivery_time else None,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "version": self.version,
        }
