from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from tenancy.managers import TenantManager


class CommissionTransaction(models.Model):
    """One commission accrual for exactly one order.

    Rows only move PENDING -> PAID, in bulk, through the payout processor, and
    are never deleted.
    """

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        PAID = "PAID", "Paid"

    commission = models.ForeignKey(
        "commission.DealerCommission",
        on_delete=models.SET_NULL,
        related_name="transactions",
        null=True,
        blank=True,
    )
    parent_dealer = models.ForeignKey(
        "dealers.Dealer",
        on_delete=models.PROTECT,
        related_name="earned_commission_transactions",
    )
    child_dealer = models.ForeignKey(
        "dealers.Dealer",
        on_delete=models.PROTECT,
        related_name="owed_commission_transactions",
    )
    order = models.OneToOneField(
        "shop.ShopOrder",
        on_delete=models.PROTECT,
        related_name="commission_transaction",
    )
    payout = models.ForeignKey(
        "commission.CommissionPayout",
        on_delete=models.PROTECT,
        related_name="transactions",
        null=True,
        blank=True,
    )
    order_total = models.DecimalField(max_digits=12, decimal_places=2)
    commission_rate = models.DecimalField(max_digits=5, decimal_places=2)
    fixed_commission = models.DecimalField(max_digits=12, decimal_places=2)
    commission_amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager(tenant_field="parent_dealer")
    all_objects = models.Manager()

    class Meta:
        ordering = ("-created_at", "-id")
        verbose_name = "Commission Transaction"
        verbose_name_plural = "Commission Transactions"
        constraints = [
            models.CheckConstraint(
                condition=Q(commission_amount__gte=0),
                name="ck_comm_txn_amount_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(status="PENDING", paid_at__isnull=True)
                | Q(status="PAID", paid_at__isnull=False),
                name="ck_comm_txn_paid_at_matches_status",
            ),
        ]
        indexes = [
            models.Index(fields=("parent_dealer", "status"), name="idx_comm_txn_parent_status"),
            models.Index(fields=("commission", "status"), name="idx_comm_txn_contract_status"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.order_id}: {self.commission_amount} ({self.status})"

    def delete(self, *args, **kwargs):
        raise ValidationError("Commission transactions cannot be deleted.")
