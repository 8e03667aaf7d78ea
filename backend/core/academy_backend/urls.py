"""
URL configuration for academy_backend project.

Dealer-scoped APIs live under `/api/` and require a resolved dealer
(see `tenancy.middleware.TenantContextMiddleware`).
"""
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path
from rest_framework.authtoken.views import obtain_auth_token

from ledger.views import DealerLedgerEntryListAPIView


def healthz(_request):
    return JsonResponse({"status": "ok"})


urlpatterns = [
    path("admin/", admin.site.urls),
    path("healthz/", healthz, name="healthz"),
    path("api/auth/token/", obtain_auth_token, name="api-token-auth"),
    path("api/sub-dealers/", include("dealers.urls")),
    path("api/commissions/", include("commission.urls")),
    path("api/ledger/", DealerLedgerEntryListAPIView.as_view(), name="ledger-list"),
]
