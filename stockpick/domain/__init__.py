"""Domain models for catalog instruments."""

from .instrument import (
    ETF_METRICS,
    METRICS_BY_KIND,
    STOCK_METRICS,
    Etf,
    Instrument,
    InstrumentKind,
    SectorAverage,
    Stock,
    normalize_ticker,
)


__all__ = [
    "ETF_METRICS",
    "METRICS_BY_KIND",
    "STOCK_METRICS",
    "Etf",
    "Instrument",
    "InstrumentKind",
    "SectorAverage",
    "Stock",
    "normalize_ticker",
]
