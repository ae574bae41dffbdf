# core/constants.py

from __future__ import annotations

FUEL_PETROL = "petrol"
FUEL_DIESEL = "diesel"
FUEL_PREMIUM_PETROL = "premium_petrol"
FUEL_PREMIUM_DIESEL = "premium_diesel"
FUEL_CNG = "cng"
FUEL_LPG = "lpg"
FUEL_EV_CHARGING = "ev_charging"

FUEL_TYPE_CHOICES = [
    (FUEL_PETROL, "Petrol"),
    (FUEL_DIESEL, "Diesel"),
    (FUEL_PREMIUM_PETROL, "Premium Petrol"),
    (FUEL_PREMIUM_DIESEL, "Premium Diesel"),
    (FUEL_CNG, "CNG"),
    (FUEL_LPG, "LPG"),
    (FUEL_EV_CHARGING, "EV Charging"),
]

FUEL_TYPES = {value for value, _ in FUEL_TYPE_CHOICES}
