from .fuel_price import FuelPrice

__all__ = ["FuelPrice"]
