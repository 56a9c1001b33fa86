"""Range and category filtering over instrument catalogs.

Criteria may hold raw form input. Bounds are interpreted at evaluation
time: a blank or malformed bound means "no bound" on that side, so a
blank min never rejects negative values and a blank max never rejects
large ones. Filtering never raises and never reorders.
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping, Sequence, TypeVar

from pydantic import BaseModel, Field, field_validator, model_validator

from stockpick.domain.instrument import Etf, Stock


InstrumentT = TypeVar("InstrumentT", Stock, Etf)

_FLAT_BOUND = re.compile(r"^(?P<metric>.+?)_(?P<side>min|max)$")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def coerce_bound(value: Any) -> float | None:
    """Parse a raw bound; anything that is not a usable number becomes None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def _snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


class RangeBound(BaseModel):
    """Inclusive numeric bound; None on either side means unbounded."""

    min: float | None = None
    max: float | None = None

    @field_validator("min", "max", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> float | None:
        return coerce_bound(v)

    @property
    def is_blank(self) -> bool:
        return self.min is None and self.max is None

    def contains(self, value: float) -> bool:
        low = -math.inf if self.min is None else self.min
        high = math.inf if self.max is None else self.max
        return low <= value <= high


class FilterCriteria(BaseModel):
    """Per-metric bounds plus classification and exclusion constraints.

    Accepts either ``{"ranges": {"per": {"min": 0, "max": 20}}}`` or the
    flat form ``{"per_min": 0, "per_max": 20}`` (camelCase also works).
    ``sector`` and ``theme`` are folded into ``category``.
    """

    ranges: dict[str, RangeBound] = Field(default_factory=dict)
    category: str = ""
    exclude_leveraged: bool = False

    @model_validator(mode="before")
    @classmethod
    def fold_flat_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        folded: dict[str, Any] = {}
        ranges: dict[str, dict[str, Any]] = {}
        nested = data.get("ranges")
        if not isinstance(nested, Mapping):
            nested = {}
        for metric, bound in nested.items():
            if isinstance(bound, RangeBound):
                bound = bound.model_dump()
            # anything but a min/max mapping is a blank bound
            ranges[_snake(str(metric))] = dict(bound) if isinstance(bound, Mapping) else {}

        for raw_key, value in data.items():
            if raw_key == "ranges":
                continue
            key = _snake(raw_key)
            if key in ("sector", "theme"):
                if value:
                    folded["category"] = value
                continue
            match = _FLAT_BOUND.match(key)
            if match and key not in ("category", "exclude_leveraged"):
                ranges.setdefault(match.group("metric"), {})[match.group("side")] = value
                continue
            folded[key] = value

        folded["ranges"] = ranges
        return folded

    @field_validator("category", mode="before")
    @classmethod
    def none_category(cls, v: Any) -> str:
        return "" if v is None else str(v)

    def bound(self, metric: str) -> RangeBound:
        return self.ranges.get(metric) or RangeBound()


def matches(instrument: Stock | Etf, criteria: FilterCriteria) -> bool:
    """True when the instrument satisfies every present constraint."""
    for metric, bound in criteria.ranges.items():
        if bound.is_blank:
            continue
        value = instrument.metric(metric)
        # A present bound cannot be satisfied by a missing metric
        if value is None or not bound.contains(value):
            return False

    if criteria.category and instrument.classification != criteria.category:
        return False

    if criteria.exclude_leveraged and getattr(instrument, "is_leveraged", False):
        return False

    return True


def apply_filters(
    catalog: Sequence[InstrumentT], criteria: FilterCriteria
) -> list[InstrumentT]:
    """Filter a catalog by criteria, preserving catalog order."""
    return [instrument for instrument in catalog if matches(instrument, criteria)]
