from django.contrib import admin

from dealers.models import Dealer, DealerMembership


class DealerMembershipInline(admin.TabularInline):
    model = DealerMembership
    extra = 0
    raw_id_fields = ("user",)


@admin.register(Dealer)
class DealerAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "parent_dealer", "hierarchy_level", "is_active", "deleted_at")
    list_filter = ("is_active", "hierarchy_level")
    search_fields = ("name", "slug", "email", "custom_domain", "subdomain")
    readonly_fields = ("hierarchy_level", "created_at", "updated_at")
    inlines = [DealerMembershipInline]

    def get_queryset(self, request):
        return Dealer.all_objects.select_related("parent_dealer")


@admin.register(DealerMembership)
class DealerMembershipAdmin(admin.ModelAdmin):
    list_display = ("dealer", "user", "role", "is_active")
    list_filter = ("role", "is_active")
    search_fields = ("dealer__slug", "user__username")
