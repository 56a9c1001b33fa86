"""Read-only instrument catalog loaded once at startup."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Sequence

from pydantic import TypeAdapter

from stockpick.core.exceptions import NotFoundError
from stockpick.core.logging import get_logger
from stockpick.domain.instrument import (
    Etf,
    InstrumentKind,
    SectorAverage,
    Stock,
    normalize_ticker,
)


logger = get_logger("catalog")

DATA_DIR = Path(__file__).parent / "data"

_stocks_adapter = TypeAdapter(list[Stock])
_etfs_adapter = TypeAdapter(list[Etf])
_averages_adapter = TypeAdapter(list[SectorAverage])


def _unique(values: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        if value:
            seen.setdefault(value, None)
    return list(seen)


class CatalogStore:
    """In-memory stock/ETF catalogs plus sector and theme baselines.

    Ticker lookups are case-insensitive. Catalog order is preserved so
    filtering never reorders results.
    """

    def __init__(
        self,
        stocks: Sequence[Stock],
        etfs: Sequence[Etf],
        sector_averages: Sequence[SectorAverage] = (),
        theme_averages: Sequence[SectorAverage] = (),
    ):
        self._stocks: tuple[Stock, ...] = tuple(stocks)
        self._etfs: tuple[Etf, ...] = tuple(etfs)
        self._stock_index = {s.ticker: s for s in self._stocks}
        self._etf_index = {e.ticker: e for e in self._etfs}
        self._sector_averages = {a.name: a for a in sector_averages}
        self._theme_averages = {a.name: a for a in theme_averages}

    @classmethod
    def from_directory(cls, directory: str | Path) -> "CatalogStore":
        """Load stocks.json, etfs.json and averages.json from a directory."""
        root = Path(directory)
        stocks = _stocks_adapter.validate_python(
            json.loads((root / "stocks.json").read_text(encoding="utf-8"))
        )
        etfs = _etfs_adapter.validate_python(
            json.loads((root / "etfs.json").read_text(encoding="utf-8"))
        )

        sector_averages: list[SectorAverage] = []
        theme_averages: list[SectorAverage] = []
        averages_path = root / "averages.json"
        if averages_path.exists():
            raw = json.loads(averages_path.read_text(encoding="utf-8"))
            sector_averages = _averages_adapter.validate_python(raw.get("sectors", []))
            theme_averages = _averages_adapter.validate_python(raw.get("themes", []))
        else:
            logger.warning(f"No averages.json in {root}, prompts will skip comparisons")

        logger.info(
            f"Catalog loaded: {len(stocks)} stocks, {len(etfs)} ETFs",
            extra={"catalog_dir": str(root)},
        )
        return cls(stocks, etfs, sector_averages, theme_averages)

    @classmethod
    def load_default(cls, directory: str | Path | None = None) -> "CatalogStore":
        return cls.from_directory(directory or DATA_DIR)

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    @property
    def stocks(self) -> list[Stock]:
        return list(self._stocks)

    @property
    def etfs(self) -> list[Etf]:
        return list(self._etfs)

    def instruments(self, kind: InstrumentKind) -> list[Stock] | list[Etf]:
        if kind == "stock":
            return self.stocks
        if kind == "etf":
            return self.etfs
        raise NotFoundError(message=f"Unknown instrument kind: {kind}")

    def sectors(self) -> list[str]:
        return _unique(s.sector for s in self._stocks)

    def themes(self) -> list[str]:
        return _unique(e.theme for e in self._etfs)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_stock(self, ticker: str) -> Stock | None:
        return self._stock_index.get(normalize_ticker(ticker))

    def get_etf(self, ticker: str) -> Etf | None:
        return self._etf_index.get(normalize_ticker(ticker))

    def lookup(self, ticker: str) -> Stock | Etf | None:
        """Find a ticker in the stock catalog first, then the ETF catalog."""
        return self.get_stock(ticker) or self.get_etf(ticker)

    def get(self, kind: InstrumentKind, ticker: str) -> Stock | Etf | None:
        if kind == "stock":
            return self.get_stock(ticker)
        if kind == "etf":
            return self.get_etf(ticker)
        return None

    def sector_average(self, sector: str) -> SectorAverage | None:
        return self._sector_averages.get(sector)

    def theme_average(self, theme: str) -> SectorAverage | None:
        return self._theme_averages.get(theme)

    def comparison_for(self, instrument: Stock | Etf) -> SectorAverage | None:
        """Baseline used in prompts: sector average for stocks, theme average for ETFs."""
        if isinstance(instrument, Etf):
            return self.theme_average(instrument.theme)
        return self.sector_average(instrument.sector)
