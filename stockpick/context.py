"""Application wiring: one context object holding every service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from stockpick.catalog.store import CatalogStore
from stockpick.core.config import settings
from stockpick.core.logging import get_logger
from stockpick.services.analysis import AnalysisService
from stockpick.services.openai.generate import CompletionProvider, OpenAICompletionProvider
from stockpick.services.portfolio import PortfolioLedger
from stockpick.services.quota import QuotaLedger
from stockpick.services.reports import ReportStore
from stockpick.store import DocumentStore, create_store


logger = get_logger("context")


@dataclass
class AppContext:
    catalog: CatalogStore
    store: DocumentStore
    provider: CompletionProvider
    quota: QuotaLedger
    portfolio: PortfolioLedger
    reports: ReportStore
    analysis: AnalysisService

    async def close(self) -> None:
        await self.provider.close()
        await self.store.close()


def build_context(
    store: Optional[DocumentStore] = None,
    provider: Optional[CompletionProvider] = None,
    catalog: Optional[CatalogStore] = None,
) -> AppContext:
    """Wire services over the given (or configured) store, provider and catalog."""
    catalog = catalog or CatalogStore.load_default(settings.catalog_dir)
    store = store or create_store()
    provider = provider or OpenAICompletionProvider()

    quota = QuotaLedger(store)
    portfolio = PortfolioLedger(store, catalog)
    reports = ReportStore(store)
    analysis = AnalysisService(catalog, quota, reports, portfolio, provider)

    logger.info(
        "Application context built",
        extra={
            "store": type(store).__name__,
            "provider": type(provider).__name__,
            "stocks": len(catalog.stocks),
            "etfs": len(catalog.etfs),
        },
    )
    return AppContext(
        catalog=catalog,
        store=store,
        provider=provider,
        quota=quota,
        portfolio=portfolio,
        reports=reports,
        analysis=analysis,
    )
