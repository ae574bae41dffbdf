# pricing/tests/test_price_resolver.py

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.test import TestCase

from core.exceptions import LedgerError
from core.testing import DEFAULT_LIMITS, make_manager, make_nozzle, make_station, set_price
from pricing.models import FuelPrice
from pricing.services.price_resolver import (
    current_prices,
    require_price,
    resolve_price,
    set_fuel_price,
)
from readings.services.reading_engine import submit_reading

JAN_1 = date(2025, 1, 1)
FEB_1 = date(2025, 2, 1)


class PriceResolutionTests(TestCase):
    """
    GUARANTEES:
    - the price with the latest effective_from <= date wins
    - a missing price is reported, never defaulted
    - adding a later price never changes an earlier date's answer
    """

    def setUp(self):
        self.station = make_station()
        set_price(self.station, "100.00", JAN_1)
        set_price(self.station, "105.50", FEB_1)

    def test_price_effective_on_its_start_date(self):
        resolved = resolve_price(station=self.station, fuel_type="petrol", on_date=FEB_1)

        self.assertTrue(resolved.found)
        self.assertEqual(resolved.price, Decimal("105.50"))
        self.assertEqual(resolved.effective_from, FEB_1)

    def test_day_before_change_uses_previous_price(self):
        resolved = resolve_price(
            station=self.station, fuel_type="petrol", on_date=FEB_1 - timedelta(days=1)
        )
        self.assertEqual(resolved.price, Decimal("100.00"))

    def test_before_first_price_is_not_found(self):
        resolved = resolve_price(
            station=self.station, fuel_type="petrol", on_date=JAN_1 - timedelta(days=1)
        )
        self.assertFalse(resolved.found)
        self.assertIsNone(resolved.price)

    def test_require_price_raises_when_missing(self):
        with self.assertRaises(LedgerError) as ctx:
            require_price(station=self.station, fuel_type="diesel", on_date=FEB_1)
        self.assertEqual(ctx.exception.code, "PRICE_NOT_SET")
        self.assertEqual(ctx.exception.kind, "NOT_FOUND")

    def test_later_price_does_not_change_past_resolution(self):
        before = resolve_price(station=self.station, fuel_type="petrol", on_date=date(2025, 1, 15))
        set_price(self.station, "120.00", date(2025, 3, 1))
        after = resolve_price(station=self.station, fuel_type="petrol", on_date=date(2025, 1, 15))

        self.assertEqual(before, after)

    def test_prices_are_per_station(self):
        other = make_station()
        resolved = resolve_price(station=other, fuel_type="petrol", on_date=FEB_1)
        self.assertFalse(resolved.found)

    def test_current_prices_lists_unpriced_active_fuels(self):
        make_nozzle(self.station, fuel_type="diesel")

        prices = {p.fuel_type: p for p in current_prices(station=self.station, on_date=FEB_1)}

        self.assertEqual(set(prices), {"diesel", "petrol"})
        self.assertTrue(prices["petrol"].found)
        self.assertFalse(prices["diesel"].found)


class SetFuelPriceTests(TestCase):
    def setUp(self):
        self.station = make_station()
        self.manager = make_manager(self.station)

    def test_new_effective_date_creates_row(self):
        row, created = set_fuel_price(
            station=self.station,
            fuel_type="petrol",
            price="101.255",
            effective_from=JAN_1,
            user=self.manager,
        )
        self.assertTrue(created)
        self.assertEqual(row.price, Decimal("101.26"))

    def test_zero_price_rejected(self):
        with self.assertRaises(LedgerError) as ctx:
            set_fuel_price(station=self.station, fuel_type="petrol", price="0", effective_from=JAN_1)
        self.assertEqual(ctx.exception.code, "INVALID_PRICE")

    def test_unused_price_can_be_replaced(self):
        set_price(self.station, "100.00", JAN_1)
        row, created = set_fuel_price(
            station=self.station, fuel_type="petrol", price="99.00", effective_from=JAN_1
        )

        self.assertFalse(created)
        self.assertEqual(row.price, Decimal("99.00"))
        self.assertEqual(FuelPrice.objects.filter(station=self.station).count(), 1)

    def test_price_that_priced_readings_is_locked(self):
        set_price(self.station, "100.00", JAN_1)
        nozzle = make_nozzle(self.station, initial_reading="0")
        submit_reading(
            nozzle_id=nozzle.id,
            reading_date=JAN_1,
            reading_value=Decimal("10"),
            user=self.manager,
            limits=DEFAULT_LIMITS,
            today=JAN_1,
        )

        with self.assertRaises(LedgerError) as ctx:
            set_fuel_price(station=self.station, fuel_type="petrol", price="90.00", effective_from=JAN_1)
        self.assertEqual(ctx.exception.code, "PRICE_IN_USE")

        # the same value is an idempotent re-post
        _row, created = set_fuel_price(
            station=self.station, fuel_type="petrol", price="100.00", effective_from=JAN_1
        )
        self.assertFalse(created)

    def test_new_date_allowed_while_older_price_in_use(self):
        set_price(self.station, "100.00", JAN_1)
        nozzle = make_nozzle(self.station, initial_reading="0")
        submit_reading(
            nozzle_id=nozzle.id,
            reading_date=JAN_1,
            reading_value=Decimal("10"),
            user=self.manager,
            limits=DEFAULT_LIMITS,
            today=JAN_1,
        )

        _row, created = set_fuel_price(
            station=self.station, fuel_type="petrol", price="90.00", effective_from=FEB_1
        )
        self.assertTrue(created)
