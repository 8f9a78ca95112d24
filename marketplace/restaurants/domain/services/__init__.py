from .discovery_service import DiscoveryFilters, DiscoveryService, NearbyRestaurant, SortBy


__all__ = [
    "DiscoveryFilters",
    "DiscoveryService",
    "NearbyRestaurant",
    "SortBy",
]
