from rest_framework import serializers

from dealers.models import Dealer


SLUG_PATTERN = r"^[a-z0-9-]+$"
SLUG_INVALID_MESSAGE = "Slug may only contain lowercase letters, digits and hyphens."


def _blank_to_none(value):
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


class SubDealerSerializer(serializers.Serializer):
    """Input validation for creating or editing a sub-dealer."""

    name = serializers.CharField(min_length=2, max_length=150)
    slug = serializers.RegexField(
        SLUG_PATTERN,
        min_length=2,
        max_length=63,
        error_messages={"invalid": SLUG_INVALID_MESSAGE},
    )
    email = serializers.EmailField(allow_blank=True, default="")
    phone = serializers.CharField(allow_blank=True, max_length=30, default="")
    address = serializers.CharField(allow_blank=True, default="")
    logo = serializers.CharField(allow_blank=True, max_length=500, default="")
    inherit_parent_products = serializers.BooleanField(default=True)
    can_create_own_products = serializers.BooleanField(default=True)
    custom_domain = serializers.CharField(
        allow_blank=True, allow_null=True, max_length=253, default=None
    )
    subdomain = serializers.RegexField(
        SLUG_PATTERN,
        allow_blank=True,
        allow_null=True,
        max_length=63,
        default=None,
        error_messages={"invalid": SLUG_INVALID_MESSAGE},
    )

    def validate_slug(self, value):
        return value.strip().lower()

    def validate_custom_domain(self, value):
        return _blank_to_none(value)

    def validate_subdomain(self, value):
        return _blank_to_none(value)


class StatusToggleSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


class InheritanceToggleSerializer(serializers.Serializer):
    inherit_parent_products = serializers.BooleanField()


class SubDealerListSerializer(serializers.ModelSerializer):
    sub_dealer_count = serializers.IntegerField(read_only=True, default=0)
    order_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Dealer
        fields = (
            "id",
            "name",
            "slug",
            "logo",
            "is_active",
            "hierarchy_level",
            "inherit_parent_products",
            "can_create_own_products",
            "custom_domain",
            "subdomain",
            "created_at",
            "sub_dealer_count",
            "order_count",
        )
        read_only_fields = fields


class SubDealerDetailSerializer(SubDealerListSerializer):
    parent_dealer_name = serializers.CharField(source="parent_dealer.name", read_only=True, default=None)
    parent_dealer_slug = serializers.CharField(source="parent_dealer.slug", read_only=True, default=None)
    member_count = serializers.IntegerField(read_only=True, default=0)

    class Meta(SubDealerListSerializer.Meta):
        fields = SubDealerListSerializer.Meta.fields + (
            "email",
            "phone",
            "address",
            "parent_dealer_id",
            "parent_dealer_name",
            "parent_dealer_slug",
            "is_public_page_active",
            "updated_at",
            "member_count",
        )
        read_only_fields = fields


class HierarchyNodeSerializer(SubDealerListSerializer):
    depth = serializers.IntegerField(read_only=True)
    parent_dealer_id = serializers.IntegerField(read_only=True)

    class Meta(SubDealerListSerializer.Meta):
        fields = SubDealerListSerializer.Meta.fields + ("parent_dealer_id", "depth")
        read_only_fields = fields
