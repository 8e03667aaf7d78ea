from django.urls import path

from commission.views import (
    CommissionPayoutListAPIView,
    CommissionPayoutProcessAPIView,
    CommissionReportAPIView,
    CommissionSettingsDetailAPIView,
    CommissionSettingsListAPIView,
    CommissionStatsAPIView,
    CommissionStatusAPIView,
    CommissionTransactionsAPIView,
    OrderCommissionCalculateAPIView,
    PendingPayoutsAPIView,
)


urlpatterns = [
    path("settings/", CommissionSettingsListAPIView.as_view(), name="commission-settings-list"),
    path(
        "settings/<int:child_dealer_id>/",
        CommissionSettingsDetailAPIView.as_view(),
        name="commission-settings-detail",
    ),
    path(
        "settings/<int:child_dealer_id>/status/",
        CommissionStatusAPIView.as_view(),
        name="commission-settings-status",
    ),
    path(
        "orders/<int:order_id>/calculate/",
        OrderCommissionCalculateAPIView.as_view(),
        name="commission-order-calculate",
    ),
    path("payouts/", CommissionPayoutListAPIView.as_view(), name="commission-payout-list"),
    path(
        "payouts/<int:child_dealer_id>/",
        CommissionPayoutProcessAPIView.as_view(),
        name="commission-payout-process",
    ),
    path("pending-payouts/", PendingPayoutsAPIView.as_view(), name="commission-pending-payouts"),
    path("transactions/", CommissionTransactionsAPIView.as_view(), name="commission-transactions"),
    path("report/", CommissionReportAPIView.as_view(), name="commission-report"),
    path("stats/", CommissionStatsAPIView.as_view(), name="commission-stats"),
]
