from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator, RegexValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from tenancy.rbac import validate_rbac_overrides_schema


SLUG_VALIDATOR = RegexValidator(
    regex=r"^[a-z0-9-]+$",
    message="Slug may only contain lowercase letters, digits and hyphens.",
)


class ActiveDealerManager(models.Manager):
    """Hides tombstoned dealers (`deleted_at` set)."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class Dealer(models.Model):
    """A tenant: a club, or a sub-dealer under another dealer."""

    name = models.CharField(max_length=150, validators=[MinLengthValidator(2)])
    slug = models.SlugField(
        max_length=63,
        unique=True,
        validators=[MinLengthValidator(2), SLUG_VALIDATOR],
        help_text="Identifier used in the X-Dealer-ID header and public storefront URLs.",
    )
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    address = models.TextField(blank=True)
    logo = models.CharField(max_length=500, blank=True)

    parent_dealer = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        related_name="sub_dealers",
        null=True,
        blank=True,
    )
    hierarchy_level = models.PositiveSmallIntegerField(default=0, editable=False)
    inherit_parent_products = models.BooleanField(default=True)
    can_create_own_products = models.BooleanField(default=True)

    custom_domain = models.CharField(max_length=253, null=True, blank=True, unique=True)
    subdomain = models.SlugField(max_length=63, null=True, blank=True, unique=True)

    is_active = models.BooleanField(default=True)
    is_public_page_active = models.BooleanField(default=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    rbac_overrides = models.JSONField(
        default=dict,
        blank=True,
        validators=[validate_rbac_overrides_schema],
        help_text=(
            "Optional dealer RBAC overrides. "
            "Example: {'commission_payouts': {'POST': ['OWNER', 'MANAGER']}}"
        ),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ActiveDealerManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ("name",)
        verbose_name = "Dealer"
        verbose_name_plural = "Dealers"
        constraints = [
            models.CheckConstraint(
                condition=~Q(parent_dealer=models.F("id")),
                name="ck_dealer_not_own_parent",
            ),
        ]
        indexes = [
            models.Index(fields=("parent_dealer", "is_active"), name="idx_dealer_parent_active"),
        ]

    def __str__(self):
        return f"{self.name} ({self.slug})"

    @property
    def is_sub_dealer(self) -> bool:
        return self.parent_dealer_id is not None

    def clean(self):
        super().clean()
        if self.slug:
            self.slug = self.slug.strip().lower()
        if self.custom_domain:
            self.custom_domain = self.custom_domain.strip().lower()
        if self.pk is not None and self.parent_dealer_id == self.pk:
            raise ValidationError({"parent_dealer": "A dealer cannot be its own parent."})

    def save(self, *args, **kwargs):
        # hierarchy_level is fixed when the row is first written.
        if self.pk is None:
            parent = self.parent_dealer if self.parent_dealer_id else None
            self.hierarchy_level = (parent.hierarchy_level + 1) if parent is not None else 0
        return super().save(*args, **kwargs)

    def tombstone(self):
        self.is_active = False
        self.deleted_at = timezone.now()
        self.save(update_fields=["is_active", "deleted_at", "updated_at"])


class DealerMembership(models.Model):
    ROLE_MEMBER = "MEMBER"
    ROLE_MANAGER = "MANAGER"
    ROLE_OWNER = "OWNER"
    ROLE_CHOICES = [
        (ROLE_MEMBER, "Member"),
        (ROLE_MANAGER, "Manager"),
        (ROLE_OWNER, "Owner"),
    ]

    dealer = models.ForeignKey(
        Dealer,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="dealer_memberships",
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_MEMBER)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("dealer__name", "user__username")
        constraints = [
            models.UniqueConstraint(
                fields=("dealer", "user"),
                name="uq_dealer_membership_dealer_user",
            ),
        ]
        verbose_name = "Dealer Membership"
        verbose_name_plural = "Dealer Memberships"

    def __str__(self):
        return f"{self.user} @ {self.dealer} ({self.role})"
