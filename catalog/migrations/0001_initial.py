from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=220, unique=True)),
                ("sku", models.CharField(max_length=64, unique=True)),
                ("price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("offer_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                (
                    "weight",
                    models.DecimalField(blank=True, decimal_places=3, help_text="kg per unit", max_digits=8, null=True),
                ),
                ("stock", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(stock__gte=0), name="product_stock_non_negative"),
                    models.CheckConstraint(condition=models.Q(price__gte=0), name="product_price_non_negative"),
                    models.CheckConstraint(
                        condition=models.Q(offer_price__isnull=True) | models.Q(offer_price__lte=models.F("price")),
                        name="product_offer_le_price",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProductVariant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("sku", models.CharField(max_length=64, unique=True)),
                ("label", models.CharField(blank=True, max_length=120)),
                ("price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("offer_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("weight", models.DecimalField(blank=True, decimal_places=3, max_digits=8, null=True)),
                ("stock", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="variants",
                        to="catalog.product",
                    ),
                ),
            ],
            options={
                "ordering": ["sku"],
                "indexes": [models.Index(fields=["product", "is_active"], name="catalog_pro_product_9c1d2e_idx")],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(stock__gte=0), name="variant_stock_non_negative"),
                    models.CheckConstraint(
                        condition=models.Q(price__gte=0) | models.Q(price__isnull=True),
                        name="variant_price_non_negative",
                    ),
                ],
            },
        ),
    ]
