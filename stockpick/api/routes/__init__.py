"""API route modules."""

from . import analysis, catalog, health, portfolio, quota, screening

__all__ = ["analysis", "catalog", "health", "portfolio", "quota", "screening"]
