from . import visits

__all__ = ["visits"]
