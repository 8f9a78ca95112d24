"""
Marketplace Service Layer

Shared building blocks for the domain services of each bounded context
(ordering, reviews, restaurants).

Usage:
    from marketplace.services import service_ok, service_err

    result = await order_service.update_order_status(order_id, "CONFIRMED")

    if result.ok:
        order = result.value
    else:
        error = result.error
"""

from .base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

__all__ = [
    # Base classes
    "BaseService",
    "ServiceResult",
    # Helper functions
    "service_ok",
    "service_err",
    # Error codes
    "ErrorCodes",
]
