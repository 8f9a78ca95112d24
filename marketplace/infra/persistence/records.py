"""
Django ORM records for the engine's aggregates.

Records are persistence shapes only. Repositories convert them to the frozen
domain snapshots with ``to_domain`` and back with ``field_values``. Every
record carries a ``version`` column used for compare-and-swap writes.
"""

import uuid
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from marketplace.catalog.domain.models import Product
from marketplace.domain.value_objects import Address, Currency, GeoPoint, Money
from marketplace.ordering.domain.models import Order, OrderLineItem, OrderStatus, PaymentStatus
from marketplace.restaurants.domain.models import OpeningHours, Restaurant
from marketplace.reviews.domain.models import Review


def new_id() -> str:
    return str(uuid.uuid4())


class RestaurantRecord(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    merchant_ref = models.CharField(max_length=64, blank=True, db_index=True)

    # Location
    latitude = models.FloatField()
    longitude = models.FloatField()
    address = models.JSONField(null=True, blank=True)

    categories = models.JSONField(default=list, blank=True)
    opening_hours = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)

    # Rated aggregate
    rating = models.FloatField(default=0.0)
    total_reviews = models.PositiveIntegerField(default=0)

    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        app_label = "marketplace"
        db_table = "marketplace_restaurant"
        ordering = ["name", "id"]
        indexes = [
            models.Index(fields=["latitude", "longitude"], name="restaurant_lat_lng_idx"),
        ]

    def __str__(self):
        return f"Restaurant {self.name} ({self.id[:8]})"

    def to_domain(self) -> Restaurant:
        return Restaurant(
            id=self.id,
            name=self.name,
            description=self.description,
            phone=self.phone,
            merchant_ref=self.merchant_ref,
            location=GeoPoint(self.latitude, self.longitude),
            address=Address.from_dict(self.address) if self.address else None,
            categories=tuple(self.categories or ()),
            opening_hours=tuple(OpeningHours.from_dict(hours) for hours in self.opening_hours or ()),
            is_active=self.is_active,
            rating=self.rating,
            total_reviews=self.total_reviews,
            created_at=self.created_at,
            updated_at=self.updated_at,
            version=self.version,
        )


class ProductRecord(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    restaurant_ref = models.CharField(max_length=36, db_index=True)
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=100, blank=True)

    # Pricing
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal("0.00"))])
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.USD)
    available = models.BooleanField(default=True)

    # Rated aggregate
    rating = models.FloatField(default=0.0)
    total_reviews = models.PositiveIntegerField(default=0)

    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        app_label = "marketplace"
        db_table = "marketplace_product"
        ordering = ["name", "id"]

    def __str__(self):
        return f"{self.name} - {self.price} {self.currency}"

    def to_domain(self) -> Product:
        return Product(
            id=self.id,
            restaurant_ref=self.restaurant_ref,
            name=self.name,
            category=self.category,
            unit_price=Money(self.price, self.currency),
            available=self.available,
            rating=self.rating,
            total_reviews=self.total_reviews,
            version=self.version,
        )


class OrderRecord(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    customer_ref = models.CharField(max_length=64, db_index=True)
    restaurant_ref = models.CharField(max_length=36, db_index=True)

    # Line items are snapshots, stored with their unit price at order time
    items = models.JSONField(default=list)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.USD)

    delivery_address = models.JSONField()
    payment_method = models.CharField(max_length=50)
    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING, db_index=True
    )
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)

    estimated_delivery_time = models.DateTimeField(null=True, blank=True)
    actual_delivery_time = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        app_label = "marketplace"
        db_table = "marketplace_order"
        ordering = ["-created_at", "id"]
        indexes = [
            models.Index(fields=["customer_ref", "-created_at"], name="order_customer_created_idx"),
            models.Index(fields=["restaurant_ref", "-created_at"], name="order_restaurant_created_idx"),
        ]

    def __str__(self):
        return f"Order {self.id[:8]} ({self.status})"

    def to_domain(self) -> Order:
        return Order(
            id=self.id,
            customer_ref=self.customer_ref,
            restaurant_ref=self.restaurant_ref,
            items=tuple(OrderLineItem.from_dict(item) for item in self.items),
            total_price=Money(self.total_amount, self.currency),
            delivery_address=Address.from_dict(self.delivery_address),
            payment_method=self.payment_method,
            status=self.status,
            payment_status=self.payment_status,
            estimated_delivery_time=self.estimated_delivery_time,
            actual_delivery_time=self.actual_delivery_time,
            notes=self.notes or None,
            created_at=self.created_at,
            updated_at=self.updated_at,
            version=self.version,
        )

    @staticmethod
    def field_values(order: Order) -> dict:
        """Mutable columns of an order. ``id``, ``created_at`` and ``version`` are left out."""
        return {
            "customer_ref": order.customer_ref,
            "restaurant_ref": order.restaurant_ref,
            "items": [
                {
                    "product_ref": item.product_ref,
                    "unit_price": item.unit_price.to_dict(),
                    "quantity": item.quantity,
                    "notes": item.notes,
                }
                for item in order.items
            ],
            "total_amount": order.total_price.amount,
            "currency": str(order.total_price.currency),
            "delivery_address": order.delivery_address.to_dict(),
            "payment_method": order.payment_method,
            "status": str(order.status),
            "payment_status": str(order.payment_status),
            "estimated_delivery_time": order.estimated_delivery_time,
            "actual_delivery_time": order.actual_delivery_time,
            "notes": order.notes or "",
            "updated_at": order.updated_at,
        }


class ReviewRecord(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    customer_ref = models.CharField(max_length=64, db_index=True)
    restaurant_ref = models.CharField(max_length=36, db_index=True)
    # One review per order
    order_ref = models.CharField(max_length=36, unique=True)

    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True)
    images = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        app_label = "marketplace"
        db_table = "marketplace_review"
        ordering = ["-created_at", "id"]

    def __str__(self):
        return f"Review {self.id[:8]} - {self.rating} stars"

    def to_domain(self) -> Review:
        return Review(
            id=self.id,
            customer_ref=self.customer_ref,
            restaurant_ref=self.restaurant_ref,
            order_ref=self.order_ref,
            rating=self.rating,
            comment=self.comment,
            images=tuple(self.images or ()),
            created_at=self.created_at,
        )
