from django.urls import path

from dealers.views import (
    SubDealerDetailAPIView,
    SubDealerHierarchyAPIView,
    SubDealerInheritanceAPIView,
    SubDealerListCreateAPIView,
    SubDealerStatsAPIView,
    SubDealerStatusAPIView,
)


urlpatterns = [
    path("", SubDealerListCreateAPIView.as_view(), name="sub-dealer-list"),
    path("hierarchy/", SubDealerHierarchyAPIView.as_view(), name="sub-dealer-hierarchy"),
    path("stats/", SubDealerStatsAPIView.as_view(), name="sub-dealer-stats"),
    path("<int:sub_dealer_id>/", SubDealerDetailAPIView.as_view(), name="sub-dealer-detail"),
    path("<int:sub_dealer_id>/status/", SubDealerStatusAPIView.as_view(), name="sub-dealer-status"),
    path(
        "<int:sub_dealer_id>/inheritance/",
        SubDealerInheritanceAPIView.as_view(),
        name="sub-dealer-inheritance",
    ),
]
