"""Latest-report documents plus append-only history.

Every save overwrites the subject's latest document and appends a
history entry, so the latest view is cheap and nothing is lost.
"""

from __future__ import annotations

from typing import Optional, TypeVar
from uuid import uuid4

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from stockpick.core.logging import get_logger
from stockpick.domain.instrument import normalize_ticker
from stockpick.schemas.reports import InstrumentReport, PortfolioReport, utcnow
from stockpick.store.base import Document, DocumentStore, join_path, sort_documents


logger = get_logger("services.reports")

SUBJECT_TYPES = ("stock", "etf")

ReportT = TypeVar("ReportT", InstrumentReport, PortfolioReport)


def report_path(user_id: str, subject_type: str, ticker: str) -> str:
    return join_path("reports", user_id, subject_type, normalize_ticker(ticker))


def history_collection(user_id: str, subject_type: str, ticker: str) -> str:
    return join_path("report_history", user_id, subject_type, normalize_ticker(ticker))


def portfolio_report_path(user_id: str) -> str:
    return join_path("users", user_id, "portfolio_report", "latest")


def portfolio_history_collection(user_id: str) -> str:
    return join_path("users", user_id, "portfolio_report_history")


def _history_key(report: BaseModel) -> str:
    stamp = report.saved_at.strftime("%Y%m%dT%H%M%S%fZ")
    return f"{stamp}-{uuid4().hex[:6]}"


def _parse(model: type[ReportT], documents: list[Document]) -> list[ReportT]:
    reports: list[ReportT] = []
    for document in documents:
        try:
            reports.append(model.model_validate(document))
        except PydanticValidationError as e:
            logger.warning(f"Skipping malformed {model.__name__} document: {e}")
    return reports


class ReportStore:
    """Persistence for instrument and portfolio reports."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def _save(self, latest_path: str, history: str, report: ReportT) -> ReportT:
        now = utcnow()
        report = report.model_copy(update={"saved_at": now, "updated_at": now})
        document = report.model_dump(mode="json")
        await self.store.set(latest_path, document)
        await self.store.set(join_path(history, _history_key(report)), document)
        return report

    # ------------------------------------------------------------------
    # Instrument reports
    # ------------------------------------------------------------------

    async def save_report(self, user_id: str, report: InstrumentReport) -> InstrumentReport:
        saved = await self._save(
            report_path(user_id, report.subject_type, report.ticker),
            history_collection(user_id, report.subject_type, report.ticker),
            report,
        )
        logger.info(
            f"Saved {report.subject_type} report {report.ticker} for {user_id}",
            extra={"parse_error": report.error},
        )
        return saved

    async def get_report(
        self, user_id: str, subject_type: str, ticker: str
    ) -> Optional[InstrumentReport]:
        document = await self.store.get(report_path(user_id, subject_type, ticker))
        if document is None:
            return None
        reports = _parse(InstrumentReport, [document])
        return reports[0] if reports else None

    async def list_reports(
        self, user_id: str, subject_type: Optional[str] = None
    ) -> list[InstrumentReport]:
        """Latest report per subject, most recently updated first."""
        kinds = [subject_type] if subject_type else list(SUBJECT_TYPES)
        documents: list[Document] = []
        for kind in kinds:
            documents.extend(await self.store.list(join_path("reports", user_id, kind)))
        documents = sort_documents(documents, order_by="updated_at", descending=True)
        return _parse(InstrumentReport, documents)

    async def recent_reports(self, user_id: str, count: int = 5) -> list[InstrumentReport]:
        return (await self.list_reports(user_id))[: max(count, 0)]

    async def report_history(
        self, user_id: str, subject_type: str, ticker: str, limit: int = 20
    ) -> list[InstrumentReport]:
        documents = await self.store.list(
            history_collection(user_id, subject_type, ticker),
            order_by="saved_at",
            descending=True,
            limit=limit,
        )
        return _parse(InstrumentReport, documents)

    # ------------------------------------------------------------------
    # Portfolio reports
    # ------------------------------------------------------------------

    async def save_portfolio_report(self, user_id: str, report: PortfolioReport) -> PortfolioReport:
        saved = await self._save(
            portfolio_report_path(user_id), portfolio_history_collection(user_id), report
        )
        logger.info(f"Saved portfolio report for {user_id}", extra={"parse_error": report.error})
        return saved

    async def get_portfolio_report(self, user_id: str) -> Optional[PortfolioReport]:
        document = await self.store.get(portfolio_report_path(user_id))
        if document is None:
            return None
        reports = _parse(PortfolioReport, [document])
        return reports[0] if reports else None

    async def portfolio_report_history(self, user_id: str, limit: int = 20) -> list[PortfolioReport]:
        documents = await self.store.list(
            portfolio_history_collection(user_id),
            order_by="saved_at",
            descending=True,
            limit=limit,
        )
        return _parse(PortfolioReport, documents)
