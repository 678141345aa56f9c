from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Coupon",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=40, unique=True)),
                ("description", models.CharField(blank=True, max_length=200)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("fixed", "Fixed amount"),
                            ("percentage", "Percentage"),
                            ("free_shipping", "Free shipping"),
                        ],
                        max_length=16,
                    ),
                ),
                ("value", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("starts_at", models.DateTimeField()),
                ("ends_at", models.DateTimeField()),
                ("minimum_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("maximum_discount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("usage_limit", models.PositiveIntegerField(blank=True, null=True)),
                ("times_used", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-starts_at", "code"],
                "indexes": [
                    models.Index(fields=["is_active", "starts_at", "ends_at"], name="coupons_cou_is_acti_3d7f0c_idx")
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(value__gte=0), name="coupon_value_non_negative"),
                    models.CheckConstraint(
                        condition=models.Q(ends_at__gte=models.F("starts_at")), name="coupon_window_ordered"
                    ),
                ],
            },
        ),
    ]
