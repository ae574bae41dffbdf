from .station import Station
from .pump import Pump, Nozzle
from .shift import Shift

__all__ = ["Station", "Pump", "Nozzle", "Shift"]
