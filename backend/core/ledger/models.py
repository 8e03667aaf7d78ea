from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone

from tenancy.context import get_current_dealer
from tenancy.managers import TenantManager


class LedgerEntryQuerySet(models.QuerySet):
    def chain(self, chain_id: str):
        """Entries of one chain in append order."""
        return self.filter(chain_id=chain_id).order_by("id")

    def head_hash(self, chain_id: str) -> str:
        return (
            self.filter(chain_id=chain_id)
            .order_by("-id")
            .values_list("entry_hash", flat=True)
            .first()
            or ""
        )


class LedgerEntry(models.Model):
    """What a dealer (or the platform) changed, who changed it, and from which request.

    Each dealer owns the chain `dealer:<id>`; platform-level events go to
    `platform`. An entry stores the hash of its predecessor and its own
    hash over the canonical payload, so rewriting history breaks the chain.
    Rows are written once through `ledger.services.append_ledger_entry`.
    """

    SCOPE_DEALER = "DEALER"
    SCOPE_PLATFORM = "PLATFORM"
    SCOPE_CHOICES = [
        (SCOPE_DEALER, "Dealer"),
        (SCOPE_PLATFORM, "Platform"),
    ]

    ACTION_CREATE = "CREATE"
    ACTION_UPDATE = "UPDATE"
    ACTION_DELETE = "DELETE"
    ACTION_SYSTEM = "SYSTEM"
    ACTION_CHOICES = [
        (ACTION_CREATE, "Create"),
        (ACTION_UPDATE, "Update"),
        (ACTION_DELETE, "Delete"),
        (ACTION_SYSTEM, "System"),
    ]

    # Chain
    chain_id = models.CharField(max_length=80, db_index=True)
    prev_hash = models.CharField(max_length=64, blank=True, default="")
    entry_hash = models.CharField(max_length=64, unique=True)
    scope = models.CharField(max_length=20, choices=SCOPE_CHOICES, default=SCOPE_DEALER)
    dealer = models.ForeignKey(
        "dealers.Dealer",
        on_delete=models.PROTECT,
        related_name="ledger_entries",
        null=True,
        blank=True,
    )

    # Event
    event_type = models.CharField(max_length=120, blank=True)
    action = models.CharField(max_length=20, choices=ACTION_CHOICES, default=ACTION_SYSTEM)
    resource_label = models.CharField(max_length=200)
    resource_pk = models.CharField(max_length=64, blank=True)
    occurred_at = models.DateTimeField(default=timezone.now)
    data_before = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    data_after = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    # Origin
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="ledger_entries",
        null=True,
        blank=True,
    )
    actor_username = models.CharField(max_length=150, blank=True)
    request_id = models.UUIDField(null=True, blank=True)
    request_method = models.CharField(max_length=12, blank=True)
    request_path = models.CharField(max_length=255, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)

    objects = TenantManager.from_queryset(LedgerEntryQuerySet)()
    all_objects = LedgerEntryQuerySet.as_manager()

    class Meta:
        ordering = ("-occurred_at", "-id")
        verbose_name = "Ledger Entry"
        verbose_name_plural = "Ledger Entries"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(scope="DEALER", dealer__isnull=False)
                | models.Q(scope="PLATFORM", dealer__isnull=True),
                name="ck_ledger_scope_dealer",
            ),
            # Two writers that read the same head cannot both link to it.
            models.UniqueConstraint(fields=("chain_id", "prev_hash"), name="uq_ledger_prev_hash_per_chain"),
        ]
        indexes = [
            models.Index(fields=("chain_id", "occurred_at"), name="idx_ledger_chain_occurred"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"[{self.chain_id}] {self.event_type} {self.resource_label}#{self.resource_pk}"

    def _check_owner(self) -> None:
        if self.scope == self.SCOPE_PLATFORM:
            if self.dealer_id is not None:
                raise ValidationError("Platform entries cannot belong to a dealer.")
            return

        if self.dealer_id is None:
            raise ValidationError("Dealer entries need a dealer.")
        acting_dealer = get_current_dealer()
        if acting_dealer is not None and acting_dealer.pk != self.dealer_id:
            raise ValidationError("Ledger entry belongs to another dealer than the one acting on this request.")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Ledger entries cannot be changed once written.")
        self._check_owner()
        if not self.entry_hash:
            raise ValidationError("Unhashed entry; write it with ledger.services.append_ledger_entry().")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Ledger entries cannot be deleted.")
