"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient

# Settings are loaded on import and refuse the default secret in production.
os.environ["ENVIRONMENT"] = "development"

from stockpick.catalog import CatalogStore
from stockpick.context import AppContext, build_context
from stockpick.core.exceptions import ExternalServiceError
from stockpick.core.security import TokenData, create_access_token, decode_access_token
from stockpick.store import MemoryDocumentStore


STOCK_RESPONSE = """## 1. 요약
애플은 견고한 생태계를 갖춘 기술 대형주입니다.

## 2. 재무 분석
PER 29.5로 섹터 평균보다 낮습니다.
ROE 147%로 매우 높은 수익성을 보입니다.

## 3. 섹터 비교 분석
섹터 평균 대비 밸류에이션 부담이 적습니다.

## 4. 적합한 투자자
- 안정형: 적합
- 성장형: 적합
- 단타형: 부적합

## 5. 기술적 분석
- 이동평균선: 50일선이 200일선을 상향 돌파한 골든크로스 상태입니다.
- MACD: 시그널선 위에서 상승 모멘텀을 유지합니다.
- RSI: 58로 중립 구간입니다.

## 6. 매수 구간
$180~$185 구간에서 분할 매수를 추천합니다.

## 7. 매도 타이밍
$220 부근에서 일부 차익 실현을 고려하세요.

## 8. 종합 의견
장기 보유에 적합한 우량주입니다.
"""

PORTFOLIO_RESPONSE = """1. 요약 분석
기술주 비중이 높아 성장성은 좋지만 변동성이 큽니다.

2. 과대 비중 종목: AAPL, NVDA
3. 과소 비중 종목: 없음

4. 리밸런싱 전략
기술주 비중을 줄이고 배당 ETF를 늘리세요.

5. 리스크 분석
금리 인상 시 성장주 조정 위험이 있습니다.
"""

CASH_RESPONSE = """1. 예수금 투자 추천
- 추가 매수: SCHD 40%
- 신규 매수: XLV 30%, TLT 30%

2. 추천 근거
배당과 방어주 비중을 높여 변동성을 낮춥니다.
"""


class FakeCompletionProvider:
    """Deterministic stand-in for the OpenAI provider.

    Returns queued responses in order, then ``default``. Every prompt it
    receives is recorded in ``prompts``.
    """

    def __init__(self, default: str = STOCK_RESPONSE, configured: bool = True):
        self.default = default
        self.queue: list[str] = []
        self.prompts: list[str] = []
        self.error: Exception | None = None
        self.configured = configured
        self.closed = False

    @property
    def is_configured(self) -> bool:
        return self.configured

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if self.queue:
            return self.queue.pop(0)
        return self.default

    async def close(self) -> None:
        self.closed = True


class BlockingCompletionProvider(FakeCompletionProvider):
    """Holds every call open until ``release`` is set."""

    def __init__(self, default: str = STOCK_RESPONSE):
        super().__init__(default)
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def complete(self, prompt: str) -> str:
        self.started.set()
        await self.release.wait()
        return await super().complete(prompt)


@pytest.fixture
def stock_response() -> str:
    return STOCK_RESPONSE


@pytest.fixture
def portfolio_response() -> str:
    return PORTFOLIO_RESPONSE


@pytest.fixture
def cash_response() -> str:
    return CASH_RESPONSE


@pytest.fixture(scope="session")
def catalog() -> CatalogStore:
    """The packaged catalog."""
    return CatalogStore.load_default()


@pytest.fixture
def memory_store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def fake_provider() -> FakeCompletionProvider:
    return FakeCompletionProvider()


@pytest.fixture
def failing_provider() -> FakeCompletionProvider:
    provider = FakeCompletionProvider()
    provider.error = ExternalServiceError("AI provider error: upstream 500", error_code="AI_PROVIDER_ERROR")
    return provider


@pytest.fixture
def context(
    catalog: CatalogStore,
    memory_store: MemoryDocumentStore,
    fake_provider: FakeCompletionProvider,
) -> AppContext:
    return build_context(store=memory_store, provider=fake_provider, catalog=catalog)


@pytest.fixture
def client(context: AppContext) -> Generator[TestClient, None, None]:
    """Create a test client over an in-memory context."""
    from stockpick.api.app import create_api_app

    app = create_api_app(context)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def auth_token() -> str:
    """Create a valid JWT token for testing."""
    return create_access_token("user-1", email="user1@example.com", is_admin=False)


@pytest.fixture
def other_token() -> str:
    return create_access_token("user-2", email="user2@example.com", is_admin=False)


@pytest.fixture
def admin_token() -> str:
    """Create an admin JWT token for testing."""
    return create_access_token("admin-1", email="admin@example.com", is_admin=True)


@pytest.fixture
def auth_headers(auth_token: str) -> dict:
    """Create authorization headers with a regular user token."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def other_headers(other_token: str) -> dict:
    return {"Authorization": f"Bearer {other_token}"}


@pytest.fixture
def admin_headers(admin_token: str) -> dict:
    """Create authorization headers with an admin token."""
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def user(auth_token: str) -> TokenData:
    return decode_access_token(auth_token)


@pytest.fixture
def other_user(other_token: str) -> TokenData:
    return decode_access_token(other_token)


@pytest.fixture
def admin(admin_token: str) -> TokenData:
    return decode_access_token(admin_token)


@pytest.fixture
def blocking_provider() -> BlockingCompletionProvider:
    return BlockingCompletionProvider()
