from django.core.exceptions import ValidationError
from django.db import models

from tenancy.context import get_current_dealer
from tenancy.managers import TenantManager


class BaseTenantModel(models.Model):
    dealer = models.ForeignKey(
        "dealers.Dealer",
        on_delete=models.PROTECT,
        related_name="%(app_label)s_%(class)s_set",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        abstract = True

    def _enforce_dealer_scope(self):
        current_dealer = get_current_dealer()

        if self.dealer_id is None and current_dealer is not None:
            self.dealer = current_dealer

        if self.dealer_id is None:
            raise ValidationError("dealer is required.")

        if current_dealer is not None and self.dealer_id != current_dealer.id:
            raise ValidationError(
                "Cross-tenant write blocked: resource dealer does not match request dealer."
            )

    def save(self, *args, **kwargs):
        self._enforce_dealer_scope()
        return super().save(*args, **kwargs)
