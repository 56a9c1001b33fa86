"""Screening routes: filter a catalog and keep the selection consistent."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from stockpick.api.dependencies import get_context
from stockpick.context import AppContext
from stockpick.core.exceptions import ValidationError
from stockpick.domain.instrument import METRICS_BY_KIND, InstrumentKind, normalize_ticker
from stockpick.schemas.screening import (
    PresetApplyRequest,
    PresetResponse,
    ScreeningRequest,
    ScreeningResponse,
)
from stockpick.screening import FilterCriteria, ScreeningSession, SelectionSet, get_preset, list_presets


router = APIRouter(prefix="/screening", tags=["Screening"])


def _check_metrics(kind: InstrumentKind, criteria: FilterCriteria) -> None:
    allowed = METRICS_BY_KIND[kind]
    unknown = sorted(set(criteria.ranges) - set(allowed))
    if unknown:
        raise ValidationError(
            message=f"Unknown {kind} metrics: {', '.join(unknown)}",
            error_code="UNKNOWN_METRIC",
            details={"unknown": unknown, "allowed": list(allowed)},
        )


def _session(ctx: AppContext, kind: InstrumentKind, selection: list[str]) -> tuple[ScreeningSession, list[str]]:
    requested = [normalize_ticker(t) for t in selection if t and t.strip()]
    return ScreeningSession(ctx.catalog.instruments(kind), SelectionSet(requested)), requested


def _response(session: ScreeningSession, requested: list[str]) -> ScreeningResponse:
    kept = session.selection.to_list()
    return ScreeningResponse(
        results=session.results,
        selection=kept,
        removed=[t for t in dict.fromkeys(requested) if t not in kept],
        criteria=session.criteria,
    )


@router.get("/presets", response_model=list[PresetResponse])
async def get_presets(kind: Optional[InstrumentKind] = Query(default=None)) -> list[PresetResponse]:
    return [
        PresetResponse(
            name=p.name,
            kind=p.kind,
            label=p.label,
            description=p.description,
            criteria=p.criteria,
        )
        for p in list_presets(kind)
    ]


@router.post("/{kind}", response_model=ScreeningResponse)
async def screen(
    kind: InstrumentKind,
    payload: ScreeningRequest,
    ctx: AppContext = Depends(get_context),
) -> ScreeningResponse:
    _check_metrics(kind, payload.criteria)
    session, requested = _session(ctx, kind, payload.selection)
    session.apply(payload.criteria)
    return _response(session, requested)


@router.post("/{kind}/presets/{name}", response_model=ScreeningResponse)
async def apply_preset(
    kind: InstrumentKind,
    name: str,
    payload: Optional[PresetApplyRequest] = None,
    ctx: AppContext = Depends(get_context),
) -> ScreeningResponse:
    preset = get_preset(kind, name)
    session, requested = _session(ctx, kind, payload.selection if payload else [])
    session.apply_preset(preset)
    return _response(session, requested)
