"""Selection of filtered instruments for analysis."""

from __future__ import annotations

from typing import Generic, Iterable, Iterator, Sequence

from stockpick.domain.instrument import normalize_ticker

from .filters import FilterCriteria, InstrumentT, apply_filters
from .presets import Preset


class SelectionSet:
    """Ordered set of selected tickers.

    Holds identifiers only; it never owns instruments. Insertion order is
    kept so the analysis queue follows the order the user picked.
    """

    def __init__(self, tickers: Iterable[str] = ()):
        self._items: dict[str, None] = {}
        self.select(tickers)

    def __contains__(self, ticker: object) -> bool:
        return isinstance(ticker, str) and normalize_ticker(ticker) in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"SelectionSet({list(self._items)!r})"

    def toggle(self, ticker: str) -> bool:
        """Flip membership of one ticker; returns True when now selected."""
        key = normalize_ticker(ticker)
        if key in self._items:
            del self._items[key]
            return False
        self._items[key] = None
        return True

    def select(self, tickers: Iterable[str]) -> None:
        for ticker in tickers:
            if ticker and ticker.strip():
                self._items.setdefault(normalize_ticker(ticker), None)

    def select_all(self, tickers: Iterable[str]) -> None:
        """Replace the selection with every given ticker."""
        self._items.clear()
        self.select(tickers)

    def clear(self) -> None:
        self._items.clear()

    def retain(self, valid: Iterable[str]) -> list[str]:
        """Drop every ticker not in ``valid``; returns the dropped tickers."""
        keep = {normalize_ticker(t) for t in valid}
        removed = [t for t in self._items if t not in keep]
        for ticker in removed:
            del self._items[ticker]
        return removed

    def to_list(self) -> list[str]:
        return list(self._items)


class ScreeningSession(Generic[InstrumentT]):
    """A filtering session over one catalog.

    Every re-filter intersects the selection with the new results, so the
    selection never holds a ticker that is no longer visible.
    """

    def __init__(
        self,
        catalog: Sequence[InstrumentT],
        selection: SelectionSet | None = None,
    ):
        self._catalog = list(catalog)
        self.criteria = FilterCriteria()
        self.results: list[InstrumentT] = list(self._catalog)
        self.selection = selection if selection is not None else SelectionSet()
        self.last_removed: list[str] = []
        self.selection.retain(self.result_tickers())

    def result_tickers(self) -> list[str]:
        return [i.ticker for i in self.results]

    def apply(self, criteria: FilterCriteria) -> list[InstrumentT]:
        self.criteria = criteria
        self.results = apply_filters(self._catalog, criteria)
        self.last_removed = self.selection.retain(self.result_tickers())
        return self.results

    def apply_preset(self, preset: Preset) -> list[InstrumentT]:
        """Replace the active criteria wholesale with the preset and re-filter."""
        return self.apply(preset.criteria.model_copy(deep=True))

    def toggle(self, ticker: str) -> bool:
        """Toggle a ticker; tickers outside the current results are ignored."""
        if normalize_ticker(ticker) not in set(self.result_tickers()):
            return False
        return self.selection.toggle(ticker)

    def select_all(self) -> None:
        self.selection.select_all(self.result_tickers())

    def clear_selection(self) -> None:
        self.selection.clear()

    def selected(self) -> list[InstrumentT]:
        return [i for i in self.results if i.ticker in self.selection]
