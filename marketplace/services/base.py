"""
Base classes and utilities for the service layer.

This module provides the ServiceResult pattern (inspired by Rust's Result type)
and BaseService class for all marketplace services.
"""

import logging
import time
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    A result type that encapsulates success or failure from service operations.

    Inspired by Rust's Result<T, E> type, this provides a clean way to handle
    service operation outcomes without exceptions for expected failures.

    Attributes:
        ok: True if operation succeeded, False otherwise
        value: The success value (present if ok=True)
        error: Error code (present if ok=False)
        error_detail: Human-readable error message (present if ok=False)

    Examples:
        >>> result = service_ok(order)
        >>> if result.ok:
        ...     return {"order": result.value}
        >>> else:
        ...     return {"error": result.error}

        >>> result = service_err("order_not_found", "Order 123 does not exist")
        >>> print(result.error)  # "order_not_found"
        >>> print(result.error_detail)  # "Order 123 does not exist"
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_detail: Optional[str] = None


def service_ok(value: T) -> ServiceResult[T]:
    """
    Create a successful ServiceResult.

    Args:
        value: The success value

    Returns:
        ServiceResult with ok=True and the value
    """
    return ServiceResult(ok=True, value=value)


def service_err(error: str, error_detail: str = "") -> ServiceResult:
    """
    Create a failed ServiceResult.

    Args:
        error: Error code (e.g., "order_not_found", "invalid_quantity")
        error_detail: Human-readable error message

    Returns:
        ServiceResult with ok=False and error information

    Example:
        >>> return service_err("restaurant_not_found", f"Restaurant {id} does not exist")
    """
    return ServiceResult(ok=False, error=error, error_detail=error_detail or error)


class BaseService:
    """
    Base class for all services providing common functionality.

    Provides:
    - Logging with class name
    - Performance timing decorator for async methods

    Usage:
        class DiscoveryService(BaseService):
            def __init__(self, restaurants):
                super().__init__()
                self.restaurants = restaurants

            @BaseService.log_performance
            async def find_nearby(self, center, radius_km):
                self.logger.info(f"Searching {radius_km}km around {center}")
                # ... implementation
    """

    def __init__(self):
        """Initialize base service with logger."""
        self.logger = logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)

    @staticmethod
    def log_performance(func: Callable) -> Callable:
        """
        Decorator to log performance of service methods.

        Logs execution time and any errors that occur. The timing covers the
        awaited work of the coroutine.

        Args:
            func: The service method to wrap

        Returns:
            Wrapped function with performance logging

        Example:
            @BaseService.log_performance
            async def create_order(self, ...):
                # ... operation
        """

        @wraps(func)
        async def wrapper(self, *args, **kwargs):
            start_time = time.time()
            method_name = f"{self.__class__.__name__}.{func.__name__}"

            try:
                self.logger.debug(f"{method_name} started")
                result = await func(self, *args, **kwargs)
                elapsed_time = (time.time() - start_time) * 1000  # Convert to ms

                if isinstance(result, ServiceResult) and not result.ok:
                    self.logger.warning(f"{method_name} failed with error '{result.error}' in {elapsed_time:.2f}ms")
                else:
                    self.logger.info(f"{method_name} completed successfully in {elapsed_time:.2f}ms")
                return result

            except Exception as e:
                elapsed_time = (time.time() - start_time) * 1000
                self.logger.error(
                    f"{method_name} raised exception after {elapsed_time:.2f}ms: {str(e)}",
                    exc_info=True,
                )
                raise

        return wrapper


# Common error codes for marketplace services
class ErrorCodes:
    """Standard error codes used across marketplace services."""

    # Not found
    ORDER_NOT_FOUND = "order_not_found"
    RESTAURANT_NOT_FOUND = "restaurant_not_found"
    PRODUCT_NOT_FOUND = "product_not_found"
    REVIEW_NOT_FOUND = "review_not_found"
    LINE_ITEM_NOT_FOUND = "line_item_not_found"

    # Invalid state
    INVALID_STATUS_TRANSITION = "invalid_status_transition"
    ORDER_NOT_EDITABLE = "order_not_editable"

    # Validation errors
    VALIDATION_ERROR = "validation_error"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_CURRENCY = "invalid_currency"
    INVALID_COORDINATES = "invalid_coordinates"
    INVALID_RATING = "invalid_rating"
    INVALID_QUANTITY = "invalid_quantity"
    INVALID_ORDER_STATUS = "invalid_order_status"
    INVALID_PAYMENT_STATUS = "invalid_payment_status"

    # Concurrency
    CONFLICT = "conflict"

    # Money
    CURRENCY_MISMATCH = "currency_mismatch"

    # Business rules
    RESTAURANT_INACTIVE = "restaurant_inactive"
    PRODUCT_UNAVAILABLE = "product_unavailable"
    EMPTY_ORDER = "empty_order"
    DUPLICATE_REVIEW = "duplicate_review"
    ORDER_NOT_REVIEWABLE = "order_not_reviewable"
    NOT_ORDER_OWNER = "not_order_owner"
    NOT_REVIEW_OWNER = "not_review_owner"

    # Internal errors
    INTERNAL_ERROR = "internal_error"
