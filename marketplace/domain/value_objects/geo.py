"""GeoPoint value object with great-circle distance."""

import math
from dataclasses import dataclass

from marketplace.domain.errors import InvalidCoordinates

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self):
        for name in ("latitude", "longitude"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidCoordinates(f"{name.capitalize()} must be a finite number, got {value!r}")
        if not -90 <= self.latitude <= 90:
            raise InvalidCoordinates("Latitude must be between -90 and 90 degrees")
        if not -180 <= self.longitude <= 180:
            raise InvalidCoordinates("Longitude must be between -180 and 180 degrees")
        object.__setattr__(self, "latitude", float(self.latitude))
        object.__setattr__(self, "longitude", float(self.longitude))

    def distance_to(self, other: "GeoPoint") -> float:
        """Haversine distance in kilometres."""
        lat1 = math.radians(self.latitude)
        lat2 = math.radians(other.latitude)
        delta_lat = math.radians(other.latitude - self.latitude)
        delta_lon = math.radians(other.longitude - self.longitude)

        a = math.sin(delta_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(delta_lon / 2) ** 2
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
        return EARTH_RADIUS_KM * c

    def bounding_box(self, radius_km: float) -> dict:
        """
        Latitude/longitude ranges that contain every point within ``radius_km``.

        The longitude range is omitted (``None``) when the box would cross a
        pole or the antimeridian, in which case callers must not filter on it.
        """
        angular = radius_km / EARTH_RADIUS_KM
        lat_delta = math.degrees(angular)
        min_lat = self.latitude - lat_delta
        max_lat = self.latitude + lat_delta

        if min_lat <= -90 or max_lat >= 90:
            return {"min_lat": max(min_lat, -90.0), "max_lat": min(max_lat, 90.0), "min_lng": None, "max_lng": None}

        # Widest longitude of the spherical cap, reached poleward of the centre's parallel.
        lng_delta = math.degrees(math.asin(math.sin(angular) / math.cos(math.radians(self.latitude))))
        min_lng = self.longitude - lng_delta
        max_lng = self.longitude + lng_delta
        if min_lng < -180 or max_lng > 180:
            return {"min_lat": min_lat, "max_lat": max_lat, "min_lng": None, "max_lng": None}

        return {"min_lat": min_lat, "max_lat": max_lat, "min_lng": min_lng, "max_lng": max_lng}

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}
