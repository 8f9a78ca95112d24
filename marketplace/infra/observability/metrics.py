from prometheus_client import Counter, Histogram


# Order Metrics
orders_placed_total = Counter("marketplace_orders_placed_total", "Total order placement attempts", ["outcome"])
order_value = Histogram(
    "marketplace_order_value",
    "Order value distribution",
    ["currency"],
    buckets=[10, 25, 50, 100, 200, 500, 1000, float("inf")],
)
order_status_transitions_total = Counter(
    "marketplace_order_status_transitions_total", "Order status transitions", ["from_status", "to_status"]
)

# Concurrency Metrics
concurrency_conflicts_total = Counter(
    "marketplace_concurrency_conflicts_total", "Optimistic concurrency conflicts", ["aggregate"]
)

# Rating Metrics
ratings_applied_total = Counter("marketplace_ratings_applied_total", "Ratings folded into aggregates", ["aggregate"])
ratings_recomputed_total = Counter(
    "marketplace_ratings_recomputed_total", "Full rating recomputations", ["aggregate"]
)

# Notification Metrics
notification_failures_total = Counter(
    "marketplace_notification_failures_total", "Notifications that could not be dispatched", ["template"]
)

# Performance Metrics
discovery_search_duration = Histogram("marketplace_discovery_search_seconds", "Nearby restaurant search time")
