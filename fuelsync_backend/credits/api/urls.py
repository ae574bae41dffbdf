# credits/api/urls.py

from django.urls import path

from credits.api.views import (
    CreditorDetailView,
    CreditorFlagView,
    CreditorTransactionListView,
    CreditorUnflagView,
    CreditPaymentView,
    CreditSaleView,
    StationCreditorListCreateView,
    StationCreditSummaryView,
)

urlpatterns = [
    path(
        "stations/<uuid:station_id>/creditors/",
        StationCreditorListCreateView.as_view(),
        name="station-creditors",
    ),
    path(
        "stations/<uuid:station_id>/summary/",
        StationCreditSummaryView.as_view(),
        name="station-credit-summary",
    ),
    path("creditors/<uuid:creditor_id>/", CreditorDetailView.as_view(), name="creditor-detail"),
    path("creditors/<uuid:creditor_id>/credit/", CreditSaleView.as_view(), name="creditor-credit"),
    path("creditors/<uuid:creditor_id>/settle/", CreditPaymentView.as_view(), name="creditor-settle"),
    path(
        "creditors/<uuid:creditor_id>/transactions/",
        CreditorTransactionListView.as_view(),
        name="creditor-transactions",
    ),
    path("creditors/<uuid:creditor_id>/flag/", CreditorFlagView.as_view(), name="creditor-flag"),
    path("creditors/<uuid:creditor_id>/unflag/", CreditorUnflagView.as_view(), name="creditor-unflag"),
]
