# pricing/api/urls.py

from django.urls import path

from pricing.api.views import CurrentPricesView, FuelPriceListCreateView, ResolvePriceView

urlpatterns = [
    path("", FuelPriceListCreateView.as_view(), name="fuel-prices"),
    path("resolve/", ResolvePriceView.as_view(), name="fuel-price-resolve"),
    path("current/", CurrentPricesView.as_view(), name="fuel-prices-current"),
]
