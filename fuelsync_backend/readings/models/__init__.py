from .reading import NozzleReading

__all__ = ["NozzleReading"]
