# reports/api/urls.py

from django.urls import path

from reports.api.views import AgingReportView, IncomeStatementView

urlpatterns = [
    path("stations/<uuid:station_id>/aging/", AgingReportView.as_view(), name="report-aging"),
    path("stations/<uuid:station_id>/income/", IncomeStatementView.as_view(), name="report-income"),
]
