# Generated manually. Keep in sync with dealers/models.py.

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import tenancy.rbac


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Dealer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150, validators=[django.core.validators.MinLengthValidator(2)])),
                (
                    "slug",
                    models.SlugField(
                        help_text="Identifier used in the X-Dealer-ID header and public storefront URLs.",
                        max_length=63,
                        unique=True,
                        validators=[
                            django.core.validators.MinLengthValidator(2),
                            django.core.validators.RegexValidator(
                                message="Slug may only contain lowercase letters, digits and hyphens.",
                                regex="^[a-z0-9-]+$",
                            ),
                        ],
                    ),
                ),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("phone", models.CharField(blank=True, max_length=30)),
                ("address", models.TextField(blank=True)),
                ("logo", models.CharField(blank=True, max_length=500)),
                ("hierarchy_level", models.PositiveSmallIntegerField(default=0, editable=False)),
                ("inherit_parent_products", models.BooleanField(default=True)),
                ("can_create_own_products", models.BooleanField(default=True)),
                ("custom_domain", models.CharField(blank=True, max_length=253, null=True, unique=True)),
                ("subdomain", models.SlugField(blank=True, max_length=63, null=True, unique=True)),
                ("is_active", models.BooleanField(default=True)),
                ("is_public_page_active", models.BooleanField(default=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                (
                    "rbac_overrides",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Optional dealer RBAC overrides. Example: {'commission_payouts': {'POST': ['OWNER', 'MANAGER']}}",
                        validators=[tenancy.rbac.validate_rbac_overrides_schema],
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent_dealer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sub_dealers",
                        to="dealers.dealer",
                    ),
                ),
            ],
            options={
                "verbose_name": "Dealer",
                "verbose_name_plural": "Dealers",
                "ordering": ("name",),
            },
        ),
        migrations.AddConstraint(
            model_name="dealer",
            constraint=models.CheckConstraint(
                condition=models.Q(("parent_dealer", models.F("id")), _negated=True),
                name="ck_dealer_not_own_parent",
            ),
        ),
        migrations.AddIndex(
            model_name="dealer",
            index=models.Index(fields=("parent_dealer", "is_active"), name="idx_dealer_parent_active"),
        ),
        migrations.CreateModel(
            name="DealerMembership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "role",
                    models.CharField(
                        choices=[("MEMBER", "Member"), ("MANAGER", "Manager"), ("OWNER", "Owner")],
                        default="MEMBER",
                        max_length=20,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "dealer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="memberships",
                        to="dealers.dealer",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="dealer_memberships",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Dealer Membership",
                "verbose_name_plural": "Dealer Memberships",
                "ordering": ("dealer__name", "user__username"),
            },
        ),
        migrations.AddConstraint(
            model_name="dealermembership",
            constraint=models.UniqueConstraint(fields=("dealer", "user"), name="uq_dealer_membership_dealer_user"),
        ),
    ]
