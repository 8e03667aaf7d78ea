from django.db import models

from tenancy.context import get_current_dealer


class TenantManager(models.Manager):
    """Scopes reads to the dealer bound to the current request.

    Fails closed: with no dealer in context the queryset is empty. Services that
    receive the dealer explicitly use the model's `all_objects` manager instead.
    """

    def __init__(self, tenant_field: str = "dealer"):
        super().__init__()
        self.tenant_field = tenant_field

    def get_queryset(self):
        queryset = super().get_queryset()
        dealer = get_current_dealer()
        if dealer is None:
            return queryset.none()
        return queryset.filter(**{self.tenant_field: dealer})
