"""API tests over an in-memory context."""

from __future__ import annotations

from stockpick.core.exceptions import ExternalServiceError


class TestHealth:
    def test_healthy(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"] == {"store": True, "ai_provider": True}

    def test_degraded_without_ai_key(self, client, fake_provider):
        fake_provider.configured = False
        assert client.get("/health").json()["status"] == "degraded"

    def test_security_and_request_id_headers(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"


class TestCatalogApi:
    def test_lists(self, client):
        stocks = client.get("/catalog/stocks").json()
        etfs = client.get("/catalog/etfs").json()

        assert len(stocks) == 25
        assert stocks[0]["ticker"] == "AAPL"
        assert len(etfs) == 15
        assert "Technology" in client.get("/catalog/sectors").json()
        assert "Dividend" in client.get("/catalog/themes").json()

    def test_instrument_lookup(self, client):
        response = client.get("/catalog/instruments/schd")

        assert response.status_code == 200
        assert response.json()["kind"] == "etf"
        assert client.get("/catalog/instruments/NOPE").status_code == 404


class TestScreeningApi:
    """Tests for the screening endpoints."""

    def test_filter_with_selection(self, client):
        response = client.post(
            "/screening/stock",
            json={
                "criteria": {"per_max": 20, "roe_min": 20, "market_cap_max": 10000},
                "selection": ["jnj", "AAPL"],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert [r["ticker"] for r in data["results"]] == ["JNJ", "CAT"]
        assert data["selection"] == ["JNJ"]
        assert data["removed"] == ["AAPL"]

    def test_blank_criteria_returns_everything(self, client):
        response = client.post("/screening/etf", json={"criteria": {"aum_min": "", "aum_max": None}})
        assert len(response.json()["results"]) == 15

    def test_malformed_bound_means_no_bound(self, client):
        response = client.post("/screening/stock", json={"criteria": {"ranges": {"per": 5}}})

        assert response.status_code == 200
        assert len(response.json()["results"]) == 25

    def test_unknown_metric_rejected(self, client):
        response = client.post(
            "/screening/stock", json={"criteria": {"ranges": {"expense_ratio": {"max": 1}}}}
        )

        assert response.status_code == 422
        assert response.json()["error"] == "UNKNOWN_METRIC"

    def test_presets(self, client):
        presets = client.get("/screening/presets", params={"kind": "etf"}).json()
        assert {p["name"] for p in presets} == {"aggressive", "stable"}

        response = client.post("/screening/etf/presets/stable")
        assert response.status_code == 200
        assert [r["ticker"] for r in response.json()["results"]] == ["SCHD"]

    def test_unknown_preset(self, client):
        assert client.post("/screening/stock/presets/yolo").status_code == 404

    def test_unknown_kind(self, client):
        assert client.post("/screening/bond", json={}).status_code == 422


class TestAuth:
    def test_missing_token(self, client):
        response = client.get("/portfolio")

        assert response.status_code == 401
        assert response.json()["error"] == "AUTHENTICATION_FAILED"

    def test_invalid_token(self, client):
        response = client.get("/portfolio", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_TOKEN"


class TestAnalysisApi:
    """Tests for the analysis endpoints."""

    def test_analyze_and_read_back(self, client, auth_headers, fake_provider):
        response = client.post("/analysis/stock/aapl", json={"style": "growth"}, headers=auth_headers)

        assert response.status_code == 200
        report = response.json()
        assert report["ticker"] == "AAPL"
        assert report["style"] == "growth"
        assert report["recommendation"]["buy_range"] == "$180~$185"
        assert fake_provider.calls == 1

        assert client.get("/analysis/stock/AAPL", headers=auth_headers).status_code == 200
        assert len(client.get("/analysis/reports", headers=auth_headers).json()) == 1
        assert len(client.get("/analysis/reports/recent", headers=auth_headers).json()) == 1
        assert len(client.get("/analysis/stock/AAPL/history", headers=auth_headers).json()) == 1
        assert client.get("/quota/me", headers=auth_headers).json()["usage_this_month"] == 1

    def test_analyze_without_body(self, client, auth_headers):
        response = client.post("/analysis/etf/SCHD", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["subject_type"] == "etf"

    def test_reports_are_private(self, client, auth_headers, other_headers):
        client.post("/analysis/stock/AAPL", headers=auth_headers)
        assert client.get("/analysis/stock/AAPL", headers=other_headers).status_code == 404

    def test_requires_auth(self, client):
        assert client.post("/analysis/stock/AAPL").status_code == 401

    def test_unknown_ticker(self, client, auth_headers, fake_provider):
        response = client.post("/analysis/stock/NOPE", headers=auth_headers)

        assert response.status_code == 422
        assert fake_provider.calls == 0

    def test_quota_exhausted(self, client, auth_headers, admin_headers, fake_provider):
        client.put("/quota/user-1/limit", json={"limit": 0}, headers=admin_headers)

        response = client.post("/analysis/stock/AAPL", headers=auth_headers)

        assert response.status_code == 429
        assert response.json()["error"] == "QUOTA_EXCEEDED"
        assert fake_provider.calls == 0

    def test_provider_failure(self, client, auth_headers, fake_provider):
        fake_provider.error = ExternalServiceError("AI provider error: boom", error_code="AI_PROVIDER_ERROR")

        response = client.post("/analysis/stock/AAPL", headers=auth_headers)

        assert response.status_code == 503
        assert response.json()["error"] == "AI_PROVIDER_ERROR"
        assert client.get("/quota/me", headers=auth_headers).json()["usage_this_month"] == 0

    def test_portfolio_analysis(self, client, auth_headers, fake_provider, portfolio_response):
        assert client.get("/analysis/portfolio/latest", headers=auth_headers).status_code == 404
        assert client.post("/analysis/portfolio", json={}, headers=auth_headers).status_code == 422

        client.post("/portfolio/items", json={"ticker": "AAPL", "avg_cost": 150, "quantity": 3}, headers=auth_headers)
        fake_provider.queue.append(portfolio_response)

        response = client.post("/analysis/portfolio", json={"style": "균형형"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["overweight"] == ["AAPL", "NVDA"]
        latest = client.get("/analysis/portfolio/latest", headers=auth_headers)
        assert latest.json()["subject_type"] == "portfolio"
        assert len(client.get("/analysis/portfolio/history", headers=auth_headers).json()) == 1

    def test_cash_recommendation(self, client, auth_headers, fake_provider, cash_response):
        client.post("/portfolio/items", json={"ticker": "KO", "avg_cost": 55, "quantity": 10}, headers=auth_headers)
        fake_provider.queue.append(cash_response)

        response = client.post(
            "/analysis/portfolio/cash", json={"cash_amount": 1000000, "style": "안정형"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert "SCHD" in response.json()["suggestion"]
        assert client.get("/analysis/portfolio/latest", headers=auth_headers).status_code == 404

    def test_cash_must_be_positive(self, client, auth_headers):
        response = client.post("/analysis/portfolio/cash", json={"cash_amount": 0}, headers=auth_headers)
        assert response.status_code == 422


class TestPortfolioApi:
    """Tests for the portfolio endpoints."""

    def test_crud(self, client, auth_headers):
        created = client.post(
            "/portfolio/items",
            json={"ticker": "aapl", "avg_cost": 100, "quantity": 10, "current_price": 110},
            headers=auth_headers,
        )
        assert created.status_code == 201
        item = created.json()
        assert item["ticker"] == "AAPL"
        assert item["current_value"] == 1100
        assert item["return_amount"] == 100
        assert item["return_rate"] == 10.0

        portfolio = client.get("/portfolio", headers=auth_headers).json()
        assert len(portfolio["items"]) == 1
        assert portfolio["totals"]["total_value"] == 1100
        assert portfolio["totals"]["total_return_rate"] == 10.0

        updated = client.patch(
            f"/portfolio/items/{item['id']}", json={"quantity": 20}, headers=auth_headers
        )
        assert updated.status_code == 200
        assert updated.json()["current_value"] == 2200

        assert client.get(f"/portfolio/items/{item['id']}", headers=auth_headers).json()["quantity"] == 20
        assert client.delete(f"/portfolio/items/{item['id']}", headers=auth_headers).status_code == 204
        assert client.delete(f"/portfolio/items/{item['id']}", headers=auth_headers).status_code == 404

    def test_duplicate_ticker(self, client, auth_headers):
        payload = {"ticker": "KO", "avg_cost": 50, "quantity": 1}
        assert client.post("/portfolio/items", json=payload, headers=auth_headers).status_code == 201

        response = client.post("/portfolio/items", json={**payload, "ticker": "ko"}, headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["error"] == "DUPLICATE_TICKER"

    def test_invalid_items(self, client, auth_headers):
        unknown = client.post(
            "/portfolio/items", json={"ticker": "NOPE", "avg_cost": 50, "quantity": 1}, headers=auth_headers
        )
        assert unknown.status_code == 422
        assert unknown.json()["error"] == "UNKNOWN_TICKER"

        zero = client.post(
            "/portfolio/items", json={"ticker": "KO", "avg_cost": 50, "quantity": 0}, headers=auth_headers
        )
        assert zero.status_code == 422

    def test_numeric_ticker_is_a_validation_error(self, client, auth_headers):
        response = client.post(
            "/portfolio/items", json={"ticker": 123, "avg_cost": 50, "quantity": 1}, headers=auth_headers
        )
        assert response.status_code == 422

    def test_items_are_private(self, client, auth_headers, other_headers):
        item = client.post(
            "/portfolio/items", json={"ticker": "KO", "avg_cost": 50, "quantity": 1}, headers=auth_headers
        ).json()

        assert client.get(f"/portfolio/items/{item['id']}", headers=other_headers).status_code == 404
        assert client.get("/portfolio", headers=other_headers).json()["items"] == []


class TestQuotaApi:
    """Tests for the quota endpoints."""

    def test_my_quota(self, client, auth_headers):
        data = client.get("/quota/me", headers=auth_headers).json()

        assert data["limit"] == 5
        assert data["usage_this_month"] == 0
        assert data["can_use"] is True
        assert data["email"] == "user1@example.com"

    def test_admin_only_endpoints(self, client, auth_headers):
        assert client.get("/quota", headers=auth_headers).status_code == 403
        assert client.post("/quota/reset-all", headers=auth_headers).status_code == 403
        assert client.put("/quota/user-2/limit", json={"limit": 9}, headers=auth_headers).status_code == 403

    def test_admin_manages_limits(self, client, auth_headers, admin_headers):
        client.get("/quota/me", headers=auth_headers)

        response = client.put("/quota/user-1/limit", json={"limit": 9, "enabled": True}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["limit"] == 9

        records = client.get("/quota", headers=admin_headers).json()
        assert "user-1" in {r["user_id"] for r in records}

        reset = client.post("/quota/reset-all", headers=admin_headers)
        assert reset.json()["message"].startswith("Reset ")

    def test_reset_own_quota_only(self, client, auth_headers, admin_headers):
        client.post("/analysis/stock/AAPL", headers=auth_headers)

        assert client.post("/quota/user-2/reset", headers=auth_headers).status_code == 403
        response = client.post("/quota/user-1/reset", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["usage_this_month"] == 0

    def test_negative_limit_rejected(self, client, admin_headers):
        response = client.put("/quota/user-1/limit", json={"limit": -1}, headers=admin_headers)
        assert response.status_code == 422
