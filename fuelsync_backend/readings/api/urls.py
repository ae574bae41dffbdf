# readings/api/urls.py

from django.urls import path

from readings.api.views import (
    DailyReadingSummaryView,
    PreviousReadingView,
    ReadingDetailView,
    ReadingListCreateView,
    ReadingPaymentUpdateView,
)

urlpatterns = [
    path("", ReadingListCreateView.as_view(), name="readings"),
    path("summary/", DailyReadingSummaryView.as_view(), name="reading-summary"),
    path("previous/<uuid:nozzle_id>/", PreviousReadingView.as_view(), name="reading-previous"),
    path("<uuid:reading_id>/", ReadingDetailView.as_view(), name="reading-detail"),
    path("<uuid:reading_id>/payment/", ReadingPaymentUpdateView.as_view(), name="reading-payment"),
]
