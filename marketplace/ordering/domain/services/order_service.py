"""
OrderFulfillmentService - Order Lifecycle Management

Turns a list of product references into a priced order snapshot, drives the
order through its status lifecycle and keeps line items editable while the
order is still PENDING.

Every write after creation is a compare-and-swap against the version that
was read, retried on conflict. Notifications are dispatched after the write
succeeds and never undo it.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from django.utils import timezone

from infrastructure.notifications import NotificationTemplate, NotifierInterface
from marketplace.domain.errors import (
    EmptyOrder,
    MarketplaceError,
    OrderNotFound,
    ProductNotFound,
    ProductUnavailable,
    RestaurantInactive,
    RestaurantNotFound,
    ValidationError,
)
from marketplace.domain.repositories import Catalog, OrderStore, RestaurantLookup
from marketplace.domain.value_objects import Address
from marketplace.infra.observability.metrics import (
    notification_failures_total,
    order_status_transitions_total,
    order_value,
    orders_placed_total,
)
from marketplace.infra.observability.tracing import add_span_attributes, get_tracer
from marketplace.ordering.domain.models import Order, OrderLineItem, OrderStatus
from marketplace.ordering.domain.models.state_machine import parse_order_status
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok
from marketplace.services.concurrency import DEFAULT_CONFLICT_RETRY_ATTEMPTS, conflict_retrying

tracer = get_tracer(__name__)

STATUS_NOTIFICATION_TEMPLATES = {
    OrderStatus.CONFIRMED: NotificationTemplate.ORDER_CONFIRMED,
    OrderStatus.PREPARING: NotificationTemplate.ORDER_PREPARING,
    OrderStatus.READY: NotificationTemplate.ORDER_READY,
    OrderStatus.ON_DELIVERY: NotificationTemplate.ORDER_ON_DELIVERY,
    OrderStatus.DELIVERED: NotificationTemplate.ORDER_DELIVERED,
    OrderStatus.CANCELLED: NotificationTemplate.ORDER_CANCELLED,
}


@dataclass(frozen=True)
class OrderItemRequest:
    """One requested line: which product, how many, optional kitchen notes."""

    product_ref: str
    quantity: int = 1
    notes: Optional[str] = None

    @classmethod
    def coerce(cls, value: Union["OrderItemRequest", Dict[str, Any]]) -> "OrderItemRequest":
        if isinstance(value, cls):
            return value
        if not isinstance(value, dict):
            raise ValidationError(f"Order item must be a mapping, got {type(value).__name__}")

        product_ref = value.get("product_ref") or value.get("product_id") or value.get("productId")
        if not product_ref:
            raise ValidationError("Order item is missing a product reference")
        return cls(product_ref=str(product_ref), quantity=value.get("quantity", 1), notes=value.get("notes"))


def _paginated(results: List, total: int, page: int, page_size: int) -> Dict:
    return {
        "results": results,
        "count": total,
        "page": page,
        "page_size": page_size,
        "num_pages": (total + page_size - 1) // page_size,
    }


class OrderFulfillmentService(BaseService):
    """
    Service for order placement and lifecycle.

    Collaborators are injected by the composition root
    (``infrastructure.container``); the service holds no state between calls.
    """

    def __init__(
        self,
        catalog: Catalog,
        restaurants: RestaurantLookup,
        orders: OrderStore,
        notifier: NotifierInterface,
        max_conflict_retries: int = DEFAULT_CONFLICT_RETRY_ATTEMPTS,
    ):
        """
        Args:
            catalog: Product lookup
            restaurants: Restaurant lookup
            orders: Order persistence with compare-and-swap
            notifier: Best-effort notification dispatch
            max_conflict_retries: Attempts per read-modify-write before a conflict surfaces
        """
        super().__init__()
        self.catalog = catalog
        self.restaurants = restaurants
        self.orders = orders
        self.notifier = notifier
        self.max_conflict_retries = max_conflict_retries

    # ===== Helpers =====

    def _failure(self, operation: str, error: Exception) -> ServiceResult:
        if isinstance(error, MarketplaceError):
            return service_err(error.code, str(error))
        self.logger.error(f"Unexpected error in {operation}: {error}", exc_info=True)
        return service_err(ErrorCodes.INTERNAL_ERROR, str(error))

    async def _notify(self, recipient_ref: str, template: str, payload: Dict[str, Any]) -> None:
        """Dispatch a notification. Failures are logged, never raised."""
        try:
            await self.notifier.notify(recipient_ref, template, payload)
        except Exception as e:
            notification_failures_total.labels(template=str(template)).inc()
            self.logger.error(f"Failed to send {template} notification to {recipient_ref}: {e}", exc_info=True)

    async def _load(self, order_id: str) -> Order:
        order = await self.orders.find_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    async def _mutate(self, order_id: str, mutation: Callable[[Order], Order]):
        """
        Read, apply ``mutation`` and compare-and-swap, retrying on conflict.

        Returns:
            (order as read on the winning attempt, saved order)
        """
        async for attempt in conflict_retrying(self.max_conflict_retries):
            with attempt:
                current = await self._load(order_id)
                saved = await self.orders.compare_and_swap(order_id, current.version, mutation(current))
        return current, saved

    async def _resolve_line_item(self, request: OrderItemRequest) -> OrderLineItem:
        product = await self.catalog.get_product(request.product_ref)
        if product is None:
            raise ProductNotFound(request.product_ref)
        if not product.available:
            raise ProductUnavailable(product.id, product.name)

        # Price is copied now; later catalog changes never reach this order.
        return OrderLineItem(
            product_ref=product.id, unit_price=product.unit_price, quantity=request.quantity, notes=request.notes
        )

    # ===== Placement =====

    @BaseService.log_performance
    async def create_order(
        self,
        customer_ref: str,
        restaurant_ref: str,
        items: Iterable[Union[OrderItemRequest, Dict[str, Any]]],
        delivery_address: Union[Address, Dict[str, Any]],
        payment_method: str,
        notes: Optional[str] = None,
    ) -> ServiceResult[Order]:
        """
        Place a new PENDING order.

        Steps:
            1. Restaurant must exist and be accepting orders
            2. Every product must exist and be available; its current price is snapshotted
            3. At least one line is required
            4. Total is summed in the currency of the first line
            5. Persist, then notify the restaurant (new_order) and the customer (order_created)

        Example:
            >>> result = await service.create_order(
            ...     "customer-1", restaurant.id, [{"product_ref": pizza.id, "quantity": 2}], address, "card"
            ... )
            >>> if result.ok:
            ...     order = result.value
        """
        with tracer.start_as_current_span("order.create") as span:
            add_span_attributes(span, customer_ref=customer_ref, restaurant_ref=restaurant_ref)

            try:
                with tracer.start_as_current_span("order.check_restaurant"):
                    restaurant = await self.restaurants.get_restaurant(restaurant_ref)
                    if restaurant is None:
                        raise RestaurantNotFound(restaurant_ref)
                    if not restaurant.is_active:
                        raise RestaurantInactive(restaurant_ref, "is not currently active")
                    now = timezone.now()
                    if not restaurant.is_accepting_orders(now):
                        raise RestaurantInactive(restaurant_ref, "is closed at this time")

                with tracer.start_as_current_span("order.resolve_items"):
                    line_items = []
                    for item in items:
                        line_items.append(await self._resolve_line_item(OrderItemRequest.coerce(item)))
                    if not line_items:
                        raise EmptyOrder()

                with tracer.start_as_current_span("order.calculate_total"):
                    address = (
                        delivery_address
                        if isinstance(delivery_address, Address)
                        else Address.from_dict(delivery_address or {})
                    )
                    order = Order.place(
                        customer_ref=customer_ref,
                        restaurant_ref=restaurant_ref,
                        items=line_items,
                        delivery_address=address,
                        payment_method=payment_method,
                        notes=notes,
                        now=now,
                    )

                with tracer.start_as_current_span("order.save"):
                    order = await self.orders.create(order)

            except Exception as e:
                span.record_exception(e)
                orders_placed_total.labels(outcome=getattr(e, "code", ErrorCodes.INTERNAL_ERROR)).inc()
                return self._failure("create_order", e)

            orders_placed_total.labels(outcome="success").inc()
            order_value.labels(currency=str(order.currency)).observe(float(order.total_price.amount))
            add_span_attributes(span, order_id=order.id, order_total=order.total_price)

            self.logger.info(
                f"Created order {order.id} for customer {customer_ref}: "
                f"{len(order.items)} items, total {order.total_price}"
            )

            with tracer.start_as_current_span("order.notify"):
                payload = {
                    "order_id": order.id,
                    "customer_ref": customer_ref,
                    "restaurant_ref": restaurant_ref,
                    "items": [
                        {"product_ref": item.product_ref, "quantity": item.quantity, "notes": item.notes}
                        for item in order.items
                    ],
                    "total_price": order.total_price.to_dict(),
                }
                await self._notify(restaurant_ref, NotificationTemplate.NEW_ORDER, payload)
                await self._notify(customer_ref, NotificationTemplate.ORDER_CREATED, payload)

            return service_ok(order)

    # ===== Status lifecycle =====

    @BaseService.log_performance
    async def update_order_status(self, order_id: str, new_status: Union[OrderStatus, str]) -> ServiceResult[Order]:
        """
        Move an order to ``new_status`` and notify the customer.

        Exactly one customer notification is sent per successful transition,
        chosen by the new status.
        """
        with tracer.start_as_current_span("order.update_status") as span:
            add_span_attributes(span, order_id=order_id, new_status=new_status)

            try:
                target = parse_order_status(new_status)
                now = timezone.now()
                previous, order = await self._mutate(order_id, lambda current: current.transition_to(target, now))
            except Exception as e:
                span.record_exception(e)
                return self._failure("update_order_status", e)

            order_status_transitions_total.labels(from_status=str(previous.status), to_status=str(order.status)).inc()
            self.logger.info(f"Order {order_id}: {previous.status} -> {order.status}")

            await self._notify(
                order.customer_ref,
                STATUS_NOTIFICATION_TEMPLATES[order.status],
                {
                    "order_id": order.id,
                    "restaurant_ref": order.restaurant_ref,
                    "previous_status": str(previous.status),
                    "status": str(order.status),
                },
            )
            return service_ok(order)

    async def cancel_order(self, order_id: str) -> ServiceResult[Order]:
        """Cancel an order. Same rules as any other transition: DELIVERED orders cannot be cancelled."""
        return await self.update_order_status(order_id, OrderStatus.CANCELLED)

    @BaseService.log_performance
    async def update_payment_status(self, order_id: str, payment_status: str) -> ServiceResult[Order]:
        """Record the payment outcome. Payment itself is handled elsewhere."""
        try:
            now = timezone.now()
            _, order = await self._mutate(order_id, lambda current: current.update_payment_status(payment_status, now))
        except Exception as e:
            return self._failure("update_payment_status", e)

        self.logger.info(f"Order {order_id} payment status -> {order.payment_status}")
        return service_ok(order)

    @BaseService.log_performance
    async def set_estimated_delivery_time(self, order_id: str, estimated: datetime) -> ServiceResult[Order]:
        try:
            now = timezone.now()
            _, order = await self._mutate(
                order_id, lambda current: current.set_estimated_delivery_time(estimated, now)
            )
        except Exception as e:
            return self._failure("set_estimated_delivery_time", e)
        return service_ok(order)

    # ===== Line items (PENDING only) =====

    @BaseService.log_performance
    async def add_item(
        self, order_id: str, product_ref: str, quantity: int = 1, notes: Optional[str] = None
    ) -> ServiceResult[Order]:
        """Resolve the product at its current price and append it to a PENDING order."""
        try:
            line_item = await self._resolve_line_item(OrderItemRequest(product_ref, quantity, notes))
            now = timezone.now()
            _, order = await self._mutate(order_id, lambda current: current.add_item(line_item, now))
        except Exception as e:
            return self._failure("add_item", e)

        self.logger.info(f"Added {quantity}x {product_ref} to order {order_id}; total {order.total_price}")
        return service_ok(order)

    @BaseService.log_performance
    async def remove_item(self, order_id: str, product_ref: str) -> ServiceResult[Order]:
        try:
            now = timezone.now()
            _, order = await self._mutate(order_id, lambda current: current.remove_item(product_ref, now))
        except Exception as e:
            return self._failure("remove_item", e)

        self.logger.info(f"Removed {product_ref} from order {order_id}; total {order.total_price}")
        return service_ok(order)

    @BaseService.log_performance
    async def update_item_quantity(self, order_id: str, product_ref: str, quantity: int) -> ServiceResult[Order]:
        try:
            now = timezone.now()
            _, order = await self._mutate(
                order_id, lambda current: current.update_item_quantity(product_ref, quantity, now)
            )
        except Exception as e:
            return self._failure("update_item_quantity", e)
        return service_ok(order)

    # ===== Queries =====

    @BaseService.log_performance
    async def get_order(self, order_id: str) -> ServiceResult[Order]:
        try:
            return service_ok(await self._load(order_id))
        except Exception as e:
            return self._failure("get_order", e)

    @BaseService.log_performance
    async def list_customer_orders(
        self, customer_ref: str, status: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> ServiceResult[Dict]:
        """
        List a customer's orders, newest first.

        Returns:
            ServiceResult with {results, count, page, page_size, num_pages}
        """
        try:
            status = parse_order_status(status) if status else None
            self._validate_page(page, page_size)
            orders, total = await self.orders.find_by_customer(customer_ref, status, page, page_size)
        except Exception as e:
            return self._failure("list_customer_orders", e)
        return service_ok(_paginated(orders, total, page, page_size))

    @BaseService.log_performance
    async def list_restaurant_orders(
        self, restaurant_ref: str, status: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> ServiceResult[Dict]:
        try:
            status = parse_order_status(status) if status else None
            self._validate_page(page, page_size)
            orders, total = await self.orders.find_by_restaurant(restaurant_ref, status, page, page_size)
        except Exception as e:
            return self._failure("list_restaurant_orders", e)
        return service_ok(_paginated(orders, total, page, page_size))

    @staticmethod
    def _validate_page(page: int, page_size: int) -> None:
        if page < 1:
            raise ValidationError("Page must be 1 or greater")
        if page_size < 1:
            raise ValidationError("Page size must be 1 or greater")
