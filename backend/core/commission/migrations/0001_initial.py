# Generated manually. Keep in sync with commission/models/.

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("dealers", "0001_initial"),
        ("shop", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="DealerCommission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "product_commission_rate",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        help_text="Stored for product-level sales; not applied by the order calculator.",
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                (
                    "order_commission_rate",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                (
                    "fixed_order_commission",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "minimum_payout",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("100"),
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "payout_frequency",
                    models.CharField(
                        choices=[("weekly", "Weekly"), ("monthly", "Monthly"), ("on-demand", "On demand")],
                        default="monthly",
                        max_length=20,
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "child_dealer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="parent_commissions",
                        to="dealers.dealer",
                    ),
                ),
                (
                    "parent_dealer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="child_commissions",
                        to="dealers.dealer",
                    ),
                ),
            ],
            options={
                "verbose_name": "Dealer Commission",
                "verbose_name_plural": "Dealer Commissions",
                "ordering": ("-created_at", "-id"),
            },
        ),
        migrations.AddConstraint(
            model_name="dealercommission",
            constraint=models.UniqueConstraint(fields=("parent_dealer", "child_dealer"), name="uq_dealer_commission_pair"),
        ),
        migrations.AddConstraint(
            model_name="dealercommission",
            constraint=models.CheckConstraint(
                condition=models.Q(("parent_dealer", models.F("child_dealer")), _negated=True),
                name="ck_dealer_commission_distinct_pair",
            ),
        ),
        migrations.AddConstraint(
            model_name="dealercommission",
            constraint=models.CheckConstraint(
                condition=models.Q(("order_commission_rate__gte", 0), ("order_commission_rate__lte", 100))
                & models.Q(("product_commission_rate__gte", 0), ("product_commission_rate__lte", 100)),
                name="ck_dealer_commission_rate_bounds",
            ),
        ),
        migrations.AddConstraint(
            model_name="dealercommission",
            constraint=models.CheckConstraint(
                condition=models.Q(("fixed_order_commission__gte", 0)) & models.Q(("minimum_payout__gte", 0)),
                name="ck_dealer_commission_non_negative",
            ),
        ),
        migrations.CreateModel(
            name="CommissionPayout",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("transaction_count", models.PositiveIntegerField()),
                ("paid_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "child_dealer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="received_commission_payouts",
                        to="dealers.dealer",
                    ),
                ),
                (
                    "commission",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payouts",
                        to="commission.dealercommission",
                    ),
                ),
                (
                    "parent_dealer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="issued_commission_payouts",
                        to="dealers.dealer",
                    ),
                ),
                (
                    "processed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="commission_payouts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Commission Payout",
                "verbose_name_plural": "Commission Payouts",
                "ordering": ("-paid_at", "-id"),
            },
        ),
        migrations.AddIndex(
            model_name="commissionpayout",
            index=models.Index(fields=("parent_dealer", "child_dealer", "paid_at"), name="idx_comm_payout_pair_paid"),
        ),
        migrations.CreateModel(
            name="CommissionTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_total", models.DecimalField(decimal_places=2, max_digits=12)),
                ("commission_rate", models.DecimalField(decimal_places=2, max_digits=5)),
                ("fixed_commission", models.DecimalField(decimal_places=2, max_digits=12)),
                ("commission_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("PAID", "Paid")],
                        db_index=True,
                        default="PENDING",
                        max_length=10,
                    ),
                ),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "child_dealer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="owed_commission_transactions",
                        to="dealers.dealer",
                    ),
                ),
                (
                    "commission",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="transactions",
                        to="commission.dealercommission",
                    ),
                ),
                (
                    "order",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="commission_transaction",
                        to="shop.shoporder",
                    ),
                ),
                (
                    "parent_dealer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="earned_commission_transactions",
                        to="dealers.dealer",
                    ),
                ),
                (
                    "payout",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="commission.commissionpayout",
                    ),
                ),
            ],
            options={
                "verbose_name": "Commission Transaction",
                "verbose_name_plural": "Commission Transactions",
                "ordering": ("-created_at", "-id"),
            },
        ),
        migrations.AddConstraint(
            model_name="commissiontransaction",
            constraint=models.CheckConstraint(
                condition=models.Q(("commission_amount__gte", 0)),
                name="ck_comm_txn_amount_non_negative",
            ),
        ),
        migrations.AddConstraint(
            model_name="commissiontransaction",
            constraint=models.CheckConstraint(
                condition=models.Q(("status", "PENDING"), ("paid_at__isnull", True))
                | models.Q(("status", "PAID"), ("paid_at__isnull", False)),
                name="ck_comm_txn_paid_at_matches_status",
            ),
        ),
        migrations.AddIndex(
            model_name="commissiontransaction",
            index=models.Index(fields=("parent_dealer", "status"), name="idx_comm_txn_parent_status"),
        ),
        migrations.AddIndex(
            model_name="commissiontransaction",
            index=models.Index(fields=("commission", "status"), name="idx_comm_txn_contract_status"),
        ),
    ]
