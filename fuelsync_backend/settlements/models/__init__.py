from .settlement import Settlement

__all__ = ["Settlement"]
