"""Catalog screening: filters, presets and selection."""

from .filters import FilterCriteria, RangeBound, apply_filters, coerce_bound, matches
from .presets import PRESETS, Preset, apply_preset, get_preset, list_presets
from .selection import ScreeningSession, SelectionSet


__all__ = [
    "PRESETS",
    "FilterCriteria",
    "Preset",
    "RangeBound",
    "ScreeningSession",
    "SelectionSet",
    "apply_filters",
    "apply_preset",
    "coerce_bound",
    "get_preset",
    "list_presets",
    "matches",
]
