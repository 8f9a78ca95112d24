import math

import pytest

from marketplace.domain.errors import InvalidCoordinates, ValidationError
from marketplace.domain.value_objects import Address, GeoPoint


@pytest.mark.unit
class TestGeoPointUnit:
    def test_distance_to_self_is_zero(self):
        point = GeoPoint(33.5731, -7.5898)
        assert point.distance_to(point) == 0

    def test_one_degree_of_latitude(self):
        # 6371 * pi / 180
        distance = GeoPoint(0, 0).distance_to(GeoPoint(1, 0))
        assert distance == pytest.approx(111.195, abs=0.001)

    def test_known_city_distance(self):
        paris = GeoPoint(48.8566, 2.3522)
        london = GeoPoint(51.5074, -0.1278)
        assert paris.distance_to(london) == pytest.approx(343.5, abs=1.0)

    def test_distance_is_symmetric(self):
        a = GeoPoint(33.5731, -7.5898)
        b = GeoPoint(34.0209, -6.8416)
        assert a.distance_to(b) == pytest.approx(b.distance_to(a))

    def test_antipodes(self):
        assert GeoPoint(0, 0).distance_to(GeoPoint(0, 180)) == pytest.approx(math.pi * 6371.0)

    @pytest.mark.parametrize("latitude,longitude", [(90.1, 0), (-90.1, 0), (0, 180.1), (0, -180.1)])
    def test_out_of_range_rejected(self, latitude, longitude):
        with pytest.raises(InvalidCoordinates):
            GeoPoint(latitude, longitude)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "33.5", None, True])
    def test_non_finite_or_non_numeric_rejected(self, value):
        with pytest.raises(InvalidCoordinates):
            GeoPoint(value, 0)

    def test_boundaries_accepted(self):
        GeoPoint(90, 180)
        GeoPoint(-90, -180)

    def test_bounding_box_contains_radius(self):
        center = GeoPoint(33.5731, -7.5898)
        box = center.bounding_box(5)
        assert box["min_lat"] < center.latitude < box["max_lat"]
        assert box["min_lng"] < center.longitude < box["max_lng"]

        north = GeoPoint(box["max_lat"], center.longitude)
        assert center.distance_to(north) == pytest.approx(5, abs=0.01)

    @pytest.mark.parametrize(
        "latitude, radius_km",
        [(60.0, 1000), (-60.0, 1000), (45.0, 2500), (0.0, 3000), (33.5731, 5)],
    )
    def test_bounding_box_contains_circle_edge(self, latitude, radius_km):
        center = GeoPoint(latitude, 10.0)
        box = center.bounding_box(radius_km)
        angular = radius_km * 0.999 / 6371.0
        lat1 = math.radians(center.latitude)

        for bearing in range(0, 360, 2):
            theta = math.radians(bearing)
            lat2 = math.asin(math.sin(lat1) * math.cos(angular) + math.cos(lat1) * math.sin(angular) * math.cos(theta))
            lng2 = math.radians(center.longitude) + math.atan2(
                math.sin(theta) * math.sin(angular) * math.cos(lat1),
                math.cos(angular) - math.sin(lat1) * math.sin(lat2),
            )
            point = GeoPoint(math.degrees(lat2), math.degrees(lng2))

            assert center.distance_to(point) < radius_km
            assert box["min_lat"] <= point.latitude <= box["max_lat"]
            assert box["min_lng"] <= point.longitude <= box["max_lng"], bearing

    def test_bounding_box_near_pole_drops_longitude(self):
        box = GeoPoint(89.99, 0).bounding_box(10)
        assert box["min_lng"] is None
        assert box["max_lat"] == 90.0

    def test_bounding_box_across_antimeridian_drops_longitude(self):
        box = GeoPoint(0, 179.99).bounding_box(10)
        assert box["min_lng"] is None


@pytest.mark.unit
class TestAddressUnit:
    def test_required_fields(self):
        with pytest.raises(ValidationError):
            Address(street="", city="Casablanca", state="", country="Morocco", zip_code="20000")

    def test_from_dict_accepts_camel_case_zip(self):
        address = Address.from_dict(
            {"street": "1 Rue X", "city": "Casablanca", "state": "", "country": "Morocco", "zipCode": "20000"}
        )
        assert address.zip_code == "20000"

    def test_str(self):
        address = Address("1 Rue X", "Casablanca", "CS", "Morocco", "20000", details="3rd floor")
        assert str(address) == "1 Rue X, Casablanca, CS 20000, Morocco (3rd floor)"
