"""Static instrument catalogs."""

from .store import DATA_DIR, CatalogStore


__all__ = ["CatalogStore", "DATA_DIR"]
