from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from commission.models import CommissionPayout, CommissionTransaction, DealerCommission


def _rate_field():
    return serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal("0"),
        max_value=Decimal("100"),
        default=Decimal("0"),
    )


def _default_minimum_payout():
    return Decimal(str(settings.COMMISSION_DEFAULT_MINIMUM_PAYOUT))


class CommissionSettingsSerializer(serializers.Serializer):
    """Contract terms a parent dealer submits for one of its sub-dealers."""

    order_commission_rate = _rate_field()
    product_commission_rate = _rate_field()
    fixed_order_commission = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0"),
        default=Decimal("0"),
    )
    minimum_payout = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0"),
        default=_default_minimum_payout,
    )
    payout_frequency = serializers.ChoiceField(
        choices=DealerCommission.PayoutFrequency.choices,
        default=DealerCommission.PayoutFrequency.MONTHLY,
    )


class ChildDealerRefSerializer(serializers.Serializer):
    child_dealer_id = serializers.IntegerField(min_value=1)


class CommissionStatusSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


class DealerCommissionSerializer(serializers.ModelSerializer):
    child_dealer_name = serializers.CharField(source="child_dealer.name", read_only=True)
    child_dealer_slug = serializers.CharField(source="child_dealer.slug", read_only=True)

    class Meta:
        model = DealerCommission
        fields = (
            "id",
            "parent_dealer_id",
            "child_dealer_id",
            "child_dealer_name",
            "child_dealer_slug",
            "order_commission_rate",
            "product_commission_rate",
            "fixed_order_commission",
            "minimum_payout",
            "payout_frequency",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class CommissionTransactionSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    child_dealer_name = serializers.CharField(source="child_dealer.name", read_only=True)

    class Meta:
        model = CommissionTransaction
        fields = (
            "id",
            "order_id",
            "order_number",
            "order_total",
            "commission_rate",
            "fixed_commission",
            "commission_amount",
            "status",
            "paid_at",
            "created_at",
            "child_dealer_id",
            "child_dealer_name",
            "payout_id",
        )
        read_only_fields = fields


class CommissionPayoutSerializer(serializers.ModelSerializer):
    child_dealer_name = serializers.CharField(source="child_dealer.name", read_only=True)
    processed_by = serializers.CharField(source="processed_by.username", read_only=True, default=None)

    class Meta:
        model = CommissionPayout
        fields = (
            "id",
            "commission_id",
            "child_dealer_id",
            "child_dealer_name",
            "total_amount",
            "transaction_count",
            "paid_at",
            "processed_by",
        )
        read_only_fields = fields


class PendingPayoutSerializer(serializers.Serializer):
    child_dealer_id = serializers.IntegerField()
    child_dealer_name = serializers.CharField()
    pending_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    transaction_count = serializers.IntegerField()
    minimum_payout = serializers.DecimalField(max_digits=12, decimal_places=2)
    payout_frequency = serializers.CharField()
    can_payout = serializers.BooleanField()
    last_payout_at = serializers.DateTimeField(allow_null=True)
    next_payout_on = serializers.DateField(allow_null=True)


class ReportQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False, allow_null=True, default=None)
    end_date = serializers.DateField(required=False, allow_null=True, default=None)
    child_dealer_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    status = serializers.ChoiceField(
        choices=CommissionTransaction.Status.choices,
        required=False,
        allow_null=True,
        default=None,
    )


class CommissionStatsSerializer(serializers.Serializer):
    total_earned = serializers.DecimalField(max_digits=14, decimal_places=2)
    pending_payouts = serializers.DecimalField(max_digits=14, decimal_places=2)
    paid_payouts = serializers.DecimalField(max_digits=14, decimal_places=2)
    active_sub_dealers = serializers.IntegerField()


class CommissionReportSerializer(serializers.Serializer):
    total_commission = serializers.DecimalField(max_digits=14, decimal_places=2)
    pending_commission = serializers.DecimalField(max_digits=14, decimal_places=2)
    paid_commission = serializers.DecimalField(max_digits=14, decimal_places=2)
    transaction_count = serializers.IntegerField()
    transactions = CommissionTransactionSerializer(many=True)
