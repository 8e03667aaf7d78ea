from django.contrib import admin

from shop.models import ShopOrder


@admin.register(ShopOrder)
class ShopOrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "dealer", "total", "status", "payment_status", "created_at")
    list_filter = ("status", "payment_status")
    search_fields = ("order_number", "customer_name", "dealer__slug")

    def get_queryset(self, request):
        return ShopOrder.all_objects.select_related("dealer")
