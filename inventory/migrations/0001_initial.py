import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("inflow", "Inflow"),
                            ("outflow", "Outflow"),
                            ("adjustment", "Adjustment"),
                            ("reserve", "Reserve"),
                            ("release", "Release"),
                        ],
                        db_index=True,
                        max_length=16,
                    ),
                ),
                ("requested_quantity", models.DecimalField(decimal_places=2, max_digits=12)),
                ("stock_before", models.DecimalField(decimal_places=2, max_digits=12)),
                ("stock_after", models.DecimalField(decimal_places=2, max_digits=12)),
                ("signed_quantity", models.DecimalField(decimal_places=2, max_digits=12)),
                ("reason", models.CharField(max_length=500)),
                ("reference", models.CharField(blank=True, max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="catalog.product",
                    ),
                ),
                (
                    "variant",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="catalog.productvariant",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "ledger entries",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["product", "created_at"], name="inventory_l_product_4b8e1a_idx"),
                    models.Index(fields=["variant", "created_at"], name="inventory_l_variant_7f2c3d_idx"),
                    models.Index(fields=["actor", "created_at"], name="inventory_l_actor_i_1e9a5b_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(stock_after__gte=0), name="ledger_stock_after_non_negative"
                    ),
                    models.CheckConstraint(condition=~models.Q(reason=""), name="ledger_reason_not_blank"),
                ],
            },
        ),
    ]
