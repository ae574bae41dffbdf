# settlements/api/urls.py

from django.urls import path

from settlements.api.views import (
    SettlementApproveView,
    SettlementDetailView,
    StationSettlementListCreateView,
)

urlpatterns = [
    path(
        "stations/<uuid:station_id>/",
        StationSettlementListCreateView.as_view(),
        name="station-settlements",
    ),
    path("<uuid:settlement_id>/", SettlementDetailView.as_view(), name="settlement-detail"),
    path("<uuid:settlement_id>/approve/", SettlementApproveView.as_view(), name="settlement-approve"),
]
