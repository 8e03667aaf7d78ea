from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from tenancy.managers import TenantManager


class CommissionPayout(models.Model):
    """A settled batch: every transaction a single payout flipped to PAID."""

    commission = models.ForeignKey(
        "commission.DealerCommission",
        on_delete=models.SET_NULL,
        related_name="payouts",
        null=True,
        blank=True,
    )
    parent_dealer = models.ForeignKey(
        "dealers.Dealer",
        on_delete=models.PROTECT,
        related_name="issued_commission_payouts",
    )
    child_dealer = models.ForeignKey(
        "dealers.Dealer",
        on_delete=models.PROTECT,
        related_name="received_commission_payouts",
    )
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)
    transaction_count = models.PositiveIntegerField()
    paid_at = models.DateTimeField(default=timezone.now)
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="commission_payouts",
        null=True,
        blank=True,
    )

    objects = TenantManager(tenant_field="parent_dealer")
    all_objects = models.Manager()

    class Meta:
        ordering = ("-paid_at", "-id")
        verbose_name = "Commission Payout"
        verbose_name_plural = "Commission Payouts"
        indexes = [
            models.Index(fields=("parent_dealer", "child_dealer", "paid_at"), name="idx_comm_payout_pair_paid"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.child_dealer_id}: {self.total_amount} @ {self.paid_at:%Y-%m-%d}"
