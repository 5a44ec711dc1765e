from . import categories, files

__all__ = ["categories", "files"]
