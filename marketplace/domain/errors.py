"""
Domain errors for the order fulfillment and rating engine.

Every error is scoped to a single operation and carries a stable ``code`` from
``ErrorCodes`` so services can turn it into a ``ServiceResult`` without
inspecting the message.
"""

from marketplace.services.base import ErrorCodes


class MarketplaceError(Exception):
    """Base exception for all engine errors."""

    code = ErrorCodes.INTERNAL_ERROR


# ===== Not found =====


class NotFoundError(MarketplaceError):
    """An order, restaurant, product or review could not be resolved."""


class OrderNotFound(NotFoundError):
    code = ErrorCodes.ORDER_NOT_FOUND

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class RestaurantNotFound(NotFoundError):
    code = ErrorCodes.RESTAURANT_NOT_FOUND

    def __init__(self, restaurant_id: str):
        self.restaurant_id = restaurant_id
        super().__init__(f"Restaurant {restaurant_id} not found")


class ProductNotFound(NotFoundError):
    code = ErrorCodes.PRODUCT_NOT_FOUND

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class ReviewNotFound(NotFoundError):
    code = ErrorCodes.REVIEW_NOT_FOUND

    def __init__(self, review_id: str):
        self.review_id = review_id
        super().__init__(f"Review {review_id} not found")


class LineItemNotFound(NotFoundError):
    code = ErrorCodes.LINE_ITEM_NOT_FOUND

    def __init__(self, order_id: str, product_ref: str):
        self.order_id = order_id
        self.product_ref = product_ref
        super().__init__(f"Order {order_id} has no line item for product {product_ref}")


# ===== Invalid state =====


class InvalidStateError(MarketplaceError):
    """The aggregate is not in a state that allows the requested change."""


class InvalidStatusTransition(InvalidStateError):
    code = ErrorCodes.INVALID_STATUS_TRANSITION

    def __init__(self, current: str, attempted: str, reason: str = ""):
        self.current = current
        self.attempted = attempted
        message = f"Invalid status transition from {current} to {attempted}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class OrderNotEditable(InvalidStateError):
    code = ErrorCodes.ORDER_NOT_EDITABLE

    def __init__(self, order_id: str, status: str, action: str = "edit line items of"):
        self.order_id = order_id
        self.status = status
        super().__init__(f"Cannot {action} order {order_id} in status {status}")


# ===== Validation =====


class ValidationError(MarketplaceError):
    """A value object or input was malformed."""

    code = ErrorCodes.VALIDATION_ERROR


class InvalidAmount(ValidationError):
    code = ErrorCodes.INVALID_AMOUNT


class InvalidCurrency(ValidationError):
    code = ErrorCodes.INVALID_CURRENCY


class InvalidCoordinates(ValidationError):
    code = ErrorCodes.INVALID_COORDINATES


class InvalidRating(ValidationError):
    code = ErrorCodes.INVALID_RATING


class InvalidQuantity(ValidationError):
    code = ErrorCodes.INVALID_QUANTITY


class InvalidOrderStatus(ValidationError):
    code = ErrorCodes.INVALID_ORDER_STATUS


class InvalidPaymentStatus(ValidationError):
    code = ErrorCodes.INVALID_PAYMENT_STATUS


# ===== Concurrency =====


class ConcurrencyConflict(MarketplaceError):
    """A compare-and-swap lost against a concurrent writer. Callers retry."""

    code = ErrorCodes.CONFLICT

    def __init__(self, aggregate: str, aggregate_id: str, expected_version: int):
        self.aggregate = aggregate
        self.aggregate_id = aggregate_id
        self.expected_version = expected_version
        super().__init__(f"{aggregate} {aggregate_id} was modified concurrently (expected version {expected_version})")


# ===== Money =====


class CurrencyMismatch(MarketplaceError):
    code = ErrorCodes.CURRENCY_MISMATCH

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Currency mismatch: expected {expected}, got {actual}")


# ===== Business rules =====


class BusinessRuleViolation(MarketplaceError):
    """The request is well formed but a marketplace rule forbids it."""


class RestaurantInactive(BusinessRuleViolation):
    code = ErrorCodes.RESTAURANT_INACTIVE

    def __init__(self, restaurant_id: str, reason: str = "is not currently accepting orders"):
        self.restaurant_id = restaurant_id
        super().__init__(f"Restaurant {restaurant_id} {reason}")


class ProductUnavailable(BusinessRuleViolation):
    code = ErrorCodes.PRODUCT_UNAVAILABLE

    def __init__(self, product_id: str, name: str = ""):
        self.product_id = product_id
        super().__init__(f"Product {name or product_id} is not available")


class EmptyOrder(BusinessRuleViolation):
    code = ErrorCodes.EMPTY_ORDER

    def __init__(self, message: str = "An order must contain at least one item"):
        super().__init__(message)


class DuplicateReview(BusinessRuleViolation):
    code = ErrorCodes.DUPLICATE_REVIEW

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} has already been reviewed")


class OrderNotReviewable(BusinessRuleViolation):
    code = ErrorCodes.ORDER_NOT_REVIEWABLE

    def __init__(self, order_id: str, status: str):
        self.order_id = order_id
        self.status = status
        super().__init__(f"Only delivered orders can be reviewed; order {order_id} is {status}")


class NotOrderOwner(BusinessRuleViolation):
    code = ErrorCodes.NOT_ORDER_OWNER

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} does not belong to this customer")


class NotReviewOwner(BusinessRuleViolation):
    code = ErrorCodes.NOT_REVIEW_OWNER

    def __init__(self, review_id: str):
        self.review_id = review_id
        super().__init__(f"Review {review_id} does not belong to this customer")
