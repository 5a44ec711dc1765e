from . import catalog, investments

__all__ = ["catalog", "investments"]
