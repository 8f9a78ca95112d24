from marketplace.infra.persistence.records import OrderRecord, ProductRecord, RestaurantRecord, ReviewRecord


__all__ = [
    "OrderRecord",
    "ProductRecord",
    "RestaurantRecord",
    "ReviewRecord",
]
