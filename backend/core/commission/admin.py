from django.contrib import admin

from commission.models import CommissionPayout, CommissionTransaction, DealerCommission


@admin.register(DealerCommission)
class DealerCommissionAdmin(admin.ModelAdmin):
    list_display = (
        "parent_dealer",
        "child_dealer",
        "order_commission_rate",
        "fixed_order_commission",
        "minimum_payout",
        "payout_frequency",
        "is_active",
    )
    list_filter = ("is_active", "payout_frequency")
    search_fields = ("parent_dealer__slug", "child_dealer__slug")

    def get_queryset(self, request):
        return DealerCommission.all_objects.select_related("parent_dealer", "child_dealer")


@admin.register(CommissionTransaction)
class CommissionTransactionAdmin(admin.ModelAdmin):
    list_display = ("order", "parent_dealer", "child_dealer", "commission_amount", "status", "paid_at")
    list_filter = ("status",)
    search_fields = ("order__order_number", "child_dealer__slug")
    readonly_fields = [field.name for field in CommissionTransaction._meta.fields]

    def get_queryset(self, request):
        return CommissionTransaction.all_objects.select_related("order", "parent_dealer", "child_dealer")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CommissionPayout)
class CommissionPayoutAdmin(admin.ModelAdmin):
    list_display = ("id", "parent_dealer", "child_dealer", "total_amount", "transaction_count", "paid_at")
    readonly_fields = [field.name for field in CommissionPayout._meta.fields]

    def get_queryset(self, request):
        return CommissionPayout.all_objects.select_related("parent_dealer", "child_dealer")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
