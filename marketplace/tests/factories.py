import uuid
from decimal import Decimal

import factory
from faker import Faker

from marketplace.catalog.domain.models import Product
from marketplace.domain.value_objects import Address, GeoPoint, Money
from marketplace.infra.persistence.records import OrderRecord, ProductRecord, RestaurantRecord, ReviewRecord
from marketplace.ordering.domain.models import OrderLineItem
from marketplace.restaurants.domain.models import Restaurant

fake = Faker()  # Instantiate Faker once

# Casablanca city centre
CENTER_LAT = 33.5731
CENTER_LNG = -7.5898


# ===== Domain snapshots =====


class AddressFactory(factory.Factory):
    class Meta:
        model = Address

    street = factory.Faker("street_address")
    city = factory.Faker("city")
    state = factory.Faker("state")
    country = factory.Faker("country")
    zip_code = factory.Faker("postcode")
    details = None


class RestaurantFactory(factory.Factory):
    class Meta:
        model = Restaurant

    id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    name = factory.Sequence(lambda n: f"Restaurant {n}")
    location = factory.LazyFunction(lambda: GeoPoint(CENTER_LAT, CENTER_LNG))
    categories = ("pizza",)
    rating = 0.0
    total_reviews = 0
    is_active = True
    opening_hours = ()
    merchant_ref = factory.LazyFunction(lambda: str(uuid.uuid4()))
    description = factory.Faker("sentence", nb_words=8)
    version = 0


class ProductFactory(factory.Factory):
    class Meta:
        model = Product

    id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    restaurant_ref = factory.LazyFunction(lambda: str(uuid.uuid4()))
    name = factory.Sequence(lambda n: f"Dish {n}")
    unit_price = factory.LazyFunction(lambda: Money("10.00", "USD"))
    available = True
    category = "mains"
    version = 0


class OrderLineItemFactory(factory.Factory):
    class Meta:
        model = OrderLineItem

    product_ref = factory.LazyFunction(lambda: str(uuid.uuid4()))
    unit_price = factory.LazyFunction(lambda: Money("10.00", "USD"))
    quantity = 1
    notes = None


# ===== ORM records =====


class RestaurantRecordFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = RestaurantRecord

    id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    name = factory.Sequence(lambda n: f"Restaurant {n}")
    description = factory.Faker("sentence", nb_words=8)
    phone = factory.Faker("numerify", text="+2126########")
    merchant_ref = factory.LazyFunction(lambda: str(uuid.uuid4()))
    latitude = CENTER_LAT
    longitude = CENTER_LNG
    categories = factory.LazyFunction(lambda: ["pizza"])
    opening_hours = factory.LazyFunction(list)
    is_active = True


class ProductRecordFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductRecord

    id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    restaurant_ref = factory.LazyFunction(lambda: str(uuid.uuid4()))
    name = factory.Sequence(lambda n: f"Dish {n}")
    category = "mains"
    price = Decimal("10.00")
    currency = "USD"
    available = True


class OrderRecordFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = OrderRecord

    id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    customer_ref = factory.LazyFunction(lambda: str(uuid.uuid4()))
    restaurant_ref = factory.LazyFunction(lambda: str(uuid.uuid4()))
    items = factory.LazyFunction(
        lambda: [
            {
                "product_ref": str(uuid.uuid4()),
                "unit_price": {"amount": "10.00", "currency": "USD"},
                "quantity": 1,
                "notes": None,
            }
        ]
    )
    total_amount = Decimal("10.00")
    currency = "USD"
    delivery_address = factory.LazyFunction(
        lambda: {
            "street": fake.street_address(),
            "city": fake.city(),
            "state": fake.state(),
            "country": fake.country(),
            "zip_code": fake.postcode(),
            "details": None,
        }
    )
    payment_method = "card"
    status = "PENDING"
    payment_status = "PENDING"


class ReviewRecordFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ReviewRecord

    id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    customer_ref = factory.LazyFunction(lambda: str(uuid.uuid4()))
    restaurant_ref = factory.LazyFunction(lambda: str(uuid.uuid4()))
    order_ref = factory.LazyFunction(lambda: str(uuid.uuid4()))
    rating = 4
    comment = factory.Faker("sentence", nb_words=12)
    images = factory.LazyFunction(list)
