from . import data, reservoirs

__all__ = ["data", "reservoirs"]
