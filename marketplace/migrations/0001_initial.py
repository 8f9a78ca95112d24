import decimal

import django.core.validators
import django.utils.timezone
from django.db import migrations, models

import marketplace.infra.persistence.records


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="RestaurantRecord",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=marketplace.infra.persistence.records.new_id,
                        editable=False,
                        max_length=36,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("merchant_ref", models.CharField(blank=True, db_index=True, max_length=64)),
                ("latitude", models.FloatField()),
                ("longitude", models.FloatField()),
                ("address", models.JSONField(blank=True, null=True)),
                ("categories", models.JSONField(blank=True, default=list)),
                ("opening_hours", models.JSONField(blank=True, default=list)),
                ("is_active", models.BooleanField(default=True)),
                ("rating", models.FloatField(default=0.0)),
                ("total_reviews", models.PositiveIntegerField(default=0)),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "marketplace_restaurant",
                "ordering": ["name", "id"],
                "indexes": [models.Index(fields=["latitude", "longitude"], name="restaurant_lat_lng_idx")],
            },
        ),
        migrations.CreateModel(
            name="ProductRecord",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=marketplace.infra.persistence.records.new_id,
                        editable=False,
                        max_length=36,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("restaurant_ref", models.CharField(db_index=True, max_length=36)),
                ("name", models.CharField(max_length=255)),
                ("category", models.CharField(blank=True, max_length=100)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0.00"))],
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        choices=[
                            ("USD", "US Dollar"),
                            ("EUR", "Euro"),
                            ("GBP", "British Pound"),
                            ("JPY", "Japanese Yen"),
                            ("MAD", "Moroccan Dirham"),
                        ],
                        default="USD",
                        max_length=3,
                    ),
                ),
                ("available", models.BooleanField(default=True)),
                ("rating", models.FloatField(default=0.0)),
                ("total_reviews", models.PositiveIntegerField(default=0)),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "marketplace_product",
                "ordering": ["name", "id"],
            },
        ),
        migrations.CreateModel(
            name="OrderRecord",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=marketplace.infra.persistence.records.new_id,
                        editable=False,
                        max_length=36,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("customer_ref", models.CharField(db_index=True, max_length=64)),
                ("restaurant_ref", models.CharField(db_index=True, max_length=36)),
                ("items", models.JSONField(default=list)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "currency",
                    models.CharField(
                        choices=[
                            ("USD", "US Dollar"),
                            ("EUR", "Euro"),
                            ("GBP", "British Pound"),
                            ("JPY", "Japanese Yen"),
                            ("MAD", "Moroccan Dirham"),
                        ],
                        default="USD",
                        max_length=3,
                    ),
                ),
                ("delivery_address", models.JSONField()),
                ("payment_method", models.CharField(max_length=50)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("CONFIRMED", "Confirmed"),
                            ("PREPARING", "Preparing"),
                            ("READY", "Ready"),
                            ("ON_DELIVERY", "On Delivery"),
                            ("DELIVERED", "Delivered"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        db_index=True,
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("PAID", "Paid"), ("FAILED", "Failed")],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("estimated_delivery_time", models.DateTimeField(blank=True, null=True)),
                ("actual_delivery_time", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "marketplace_order",
                "ordering": ["-created_at", "id"],
                "indexes": [
                    models.Index(fields=["customer_ref", "-created_at"], name="order_customer_created_idx"),
                    models.Index(fields=["restaurant_ref", "-created_at"], name="order_restaurant_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReviewRecord",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=marketplace.infra.persistence.records.new_id,
                        editable=False,
                        max_length=36,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("customer_ref", models.CharField(db_index=True, max_length=64)),
                ("restaurant_ref", models.CharField(db_index=True, max_length=36)),
                ("order_ref", models.CharField(max_length=36, unique=True)),
                (
                    "rating",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ]
                    ),
                ),
                ("comment", models.TextField(blank=True)),
                ("images", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "marketplace_review",
                "ordering": ["-created_at", "id"],
            },
        ),
    ]
