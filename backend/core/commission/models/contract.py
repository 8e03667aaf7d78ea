from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q

from tenancy.managers import TenantManager


class DealerCommission(models.Model):
    """Commission contract between a parent dealer and one of its sub-dealers."""

    class PayoutFrequency(models.TextChoices):
        WEEKLY = "weekly", "Weekly"
        MONTHLY = "monthly", "Monthly"
        ON_DEMAND = "on-demand", "On demand"

    parent_dealer = models.ForeignKey(
        "dealers.Dealer",
        on_delete=models.PROTECT,
        related_name="child_commissions",
    )
    child_dealer = models.ForeignKey(
        "dealers.Dealer",
        on_delete=models.PROTECT,
        related_name="parent_commissions",
    )
    product_commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Stored for product-level sales; not applied by the order calculator.",
    )
    order_commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    fixed_order_commission = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(0)],
    )
    minimum_payout = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("100"),
        validators=[MinValueValidator(0)],
    )
    payout_frequency = models.CharField(
        max_length=20,
        choices=PayoutFrequency.choices,
        default=PayoutFrequency.MONTHLY,
    )
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager(tenant_field="parent_dealer")
    all_objects = models.Manager()

    class Meta:
        ordering = ("-created_at", "-id")
        verbose_name = "Dealer Commission"
        verbose_name_plural = "Dealer Commissions"
        constraints = [
            models.UniqueConstraint(
                fields=("parent_dealer", "child_dealer"),
                name="uq_dealer_commission_pair",
            ),
            models.CheckConstraint(
                condition=~Q(parent_dealer=F("child_dealer")),
                name="ck_dealer_commission_distinct_pair",
            ),
            models.CheckConstraint(
                condition=Q(order_commission_rate__gte=0, order_commission_rate__lte=100)
                & Q(product_commission_rate__gte=0, product_commission_rate__lte=100),
                name="ck_dealer_commission_rate_bounds",
            ),
            models.CheckConstraint(
                condition=Q(fixed_order_commission__gte=0) & Q(minimum_payout__gte=0),
                name="ck_dealer_commission_non_negative",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.parent_dealer_id} -> {self.child_dealer_id}"
