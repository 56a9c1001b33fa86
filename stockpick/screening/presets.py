"""Named filter presets per instrument kind."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from stockpick.core.exceptions import NotFoundError
from stockpick.domain.instrument import InstrumentKind

from .filters import FilterCriteria, InstrumentT, apply_filters


@dataclass(frozen=True)
class Preset:
    """A named, fully populated filter criteria literal."""

    name: str
    kind: InstrumentKind
    label: str
    description: str
    criteria: FilterCriteria


PRESETS: dict[tuple[str, str], Preset] = {
    ("stock", "aggressive"): Preset(
        name="aggressive",
        kind="stock",
        label="공격형",
        description="Low valuation ceiling with a high profitability floor",
        criteria=FilterCriteria(
            ranges={
                "per": {"min": 0, "max": 20},
                "roe": {"min": 20, "max": 1000},
                "market_cap": {"min": 0, "max": 10000},
                "dividend_yield": {"min": 0, "max": 10},
            },
            category="",
        ),
    ),
    ("stock", "stable"): Preset(
        name="stable",
        kind="stock",
        label="안정형",
        description="Large caps with steady profitability and a dividend floor",
        criteria=FilterCriteria(
            ranges={
                "per": {"min": 0, "max": 25},
                "roe": {"min": 10, "max": 1000},
                "market_cap": {"min": 100, "max": 10000},
                "dividend_yield": {"min": 2.5, "max": 10},
            },
            category="",
        ),
    ),
    ("etf", "aggressive"): Preset(
        name="aggressive",
        kind="etf",
        label="공격형",
        description="Large, low-cost technology ETFs without leverage",
        criteria=FilterCriteria(
            ranges={
                "dividend_yield": {"min": 0, "max": 5},
                "expense_ratio": {"min": 0, "max": 0.5},
                "aum": {"min": 5000, "max": 1000000},
            },
            category="Technology",
            exclude_leveraged=True,
        ),
    ),
    ("etf", "stable"): Preset(
        name="stable",
        kind="etf",
        label="안정형",
        description="Very low-cost dividend ETFs with a yield floor",
        criteria=FilterCriteria(
            ranges={
                "dividend_yield": {"min": 3.0, "max": 10},
                "expense_ratio": {"min": 0, "max": 0.2},
                "aum": {"min": 10000, "max": 1000000},
            },
            category="Dividend",
            exclude_leveraged=True,
        ),
    ),
}


def get_preset(kind: str, name: str) -> Preset:
    preset = PRESETS.get((kind, name.lower()))
    if preset is None:
        raise NotFoundError(
            message=f"Unknown {kind} preset: {name}",
            error_code="PRESET_NOT_FOUND",
        )
    return preset


def list_presets(kind: str | None = None) -> list[Preset]:
    return [p for (k, _), p in PRESETS.items() if kind is None or k == kind]


def apply_preset(catalog: Sequence[InstrumentT], kind: str, name: str) -> list[InstrumentT]:
    """Filter a catalog with a named preset's criteria in place of any others."""
    return apply_filters(catalog, get_preset(kind, name).criteria.model_copy(deep=True))
