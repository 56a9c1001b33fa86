"""Screening request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from stockpick.domain.instrument import Instrument
from stockpick.screening.filters import FilterCriteria


class ScreeningRequest(BaseModel):
    """Criteria plus the client's current selection."""

    criteria: FilterCriteria = Field(default_factory=FilterCriteria)
    selection: list[str] = Field(default_factory=list)


class PresetApplyRequest(BaseModel):
    selection: list[str] = Field(default_factory=list)


class ScreeningResponse(BaseModel):
    results: list[Instrument] = Field(default_factory=list)
    selection: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list, description="Selected tickers dropped by the filter")
    criteria: FilterCriteria = Field(default_factory=FilterCriteria)


class PresetResponse(BaseModel):
    name: str
    kind: str
    label: str
    description: str = ""
    criteria: FilterCriteria
