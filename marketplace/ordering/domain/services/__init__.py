from .order_service import STATUS_NOTIFICATION_TEMPLATES, OrderFulfillmentService, OrderItemRequest


__all__ = [
    "STATUS_NOTIFICATION_TEMPLATES",
    "OrderFulfillmentService",
    "OrderItemRequest",
]
