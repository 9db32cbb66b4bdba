"""Tests for API endpoints."""

from datetime import date
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from newsnexus.api.v1.dependencies import (
    get_admin_service,
    get_google_rss_fetcher,
    get_ingestion_service,
    get_reporting_service,
    get_state_assignment_service,
    get_content_approval_service,
)
from newsnexus.core.config import settings
from newsnexus.core.database import db_client
from newsnexus.core.exceptions import (
    AlreadyApprovedError,
    AmbiguousDataError,
    ConflictError,
    NotFoundError,
    RateLimitedError,
    ValidationError,
)
from newsnexus.main import app
from newsnexus.services.ingestion import ArticleItem, IngestResult

VERIFY_URL = "/api/v1/analysis/state-assigner/human-verify/1"

DETAIL = {
    "articleId": 1,
    "title": "Fire",
    "description": "Warehouse fire",
    "url": "https://example.com/fire",
    "stateHumanApprovedArray": [{"id": 2, "name": "California"}],
    "stateAiApproved": {
        "promptId": 7,
        "isHumanApproved": True,
        "reasoning": "Mentions the state",
        "state": {"id": 2, "name": "California"},
    },
}


def _override(dependency, service):
    app.dependency_overrides[dependency] = lambda: service
    return service


class TestEnvelope:
    """Response and error envelopes."""

    def test_root(self, test_client: TestClient) -> None:
        response = test_client.get("/")

        assert response.status_code == 200
        assert response.json()["message"] == "Server is running"

    def test_health_degrades_when_database_is_down(
        self, test_client: TestClient, monkeypatch
    ) -> None:
        monkeypatch.setattr(
            db_client,
            "health_check",
            AsyncMock(return_value={"status": "unhealthy", "connected": False, "error": "refused"}),
        )

        response = test_client.get("/health/")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["database"]["error"] == "refused"

    def test_success_envelope_echoes_correlation_id(
        self, test_client: TestClient, auth_headers
    ) -> None:
        service = _override(get_state_assignment_service, AsyncMock())
        service.get_article_detail.return_value = DETAIL

        response = test_client.get(
            "/api/v1/articles/1/details",
            headers={**auth_headers, "X-Correlation-ID": "corr-123"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] is True
        assert body["data"] == DETAIL
        assert body["meta"]["requestId"] == "corr-123"
        assert body["meta"]["apiVersion"] == "v1"
        assert response.headers["X-Correlation-ID"] == "corr-123"

    def test_unexpected_error_is_internal_error(self, auth_headers) -> None:
        service = _override(get_state_assignment_service, AsyncMock())
        service.get_article_detail.side_effect = RuntimeError("boom")
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/api/v1/articles/1/details", headers=auth_headers)

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "INTERNAL_ERROR"
        assert "boom" not in error["message"]


class TestAuthentication:
    """Bearer token dependency."""

    def test_missing_token(self, test_client: TestClient) -> None:
        response = test_client.get("/api/v1/articles/1/details")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token(self, test_client: TestClient) -> None:
        response = test_client.get(
            "/api/v1/articles/1/details", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid authentication token"

    def test_admin_route_requires_admin(self, test_client: TestClient, auth_headers) -> None:
        _override(get_admin_service, AsyncMock())

        response = test_client.get("/api/v1/admin-db/table/Article", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    def test_admin_table_dump(self, test_client: TestClient, admin_headers) -> None:
        service = _override(get_admin_service, AsyncMock())
        service.get_table.return_value = [{"id": 1, "name": "Ohio", "abbreviation": "OH"}]

        response = test_client.get("/api/v1/admin-db/table/State", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"] == {
            "tableName": "State",
            "count": 1,
            "rows": [{"id": 1, "name": "Ohio", "abbreviation": "OH"}],
        }

    def test_unknown_admin_table(self, test_client: TestClient, admin_headers) -> None:
        service = _override(get_admin_service, AsyncMock())
        service.get_table.side_effect = ValidationError(
            "Unknown table: Nope", details={"availableTables": ["Article"]}
        )

        response = test_client.get("/api/v1/admin-db/table/Nope", headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"]["details"] == {"availableTables": ["Article"]}


class TestStateAssigner:
    """State-assigner routes."""

    def test_list_defaults_to_assigned_states(self, test_client: TestClient, auth_headers) -> None:
        service = _override(get_reporting_service, AsyncMock())
        service.list_articles_with_state_assignments.return_value = [{"id": 1}]

        response = test_client.post(
            "/api/v1/analysis/state-assigner/", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"count": 1, "articles": [{"id": 1}]}
        service.list_articles_with_state_assignments.assert_awaited_once_with(False)

    def test_list_rejects_non_boolean_flag(self, test_client: TestClient, auth_headers) -> None:
        _override(get_reporting_service, AsyncMock())

        response = test_client.post(
            "/api/v1/analysis/state-assigner/",
            json={"includeNullState": "yes"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == (
            "includeNullState must be a boolean value if provided"
        )

    def test_approve(self, test_client: TestClient, auth_headers) -> None:
        service = _override(get_state_assignment_service, AsyncMock())
        service.approve_state.return_value = DETAIL

        response = test_client.post(
            VERIFY_URL, json={"action": "approve", "stateId": 2}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Article state approved successfully"
        assert response.json()["data"] == DETAIL
        service.approve_state.assert_awaited_once_with(1, 2)

    def test_reject(self, test_client: TestClient, auth_headers) -> None:
        service = _override(get_state_assignment_service, AsyncMock())
        service.reject_state.return_value = {**DETAIL, "stateHumanApprovedArray": []}

        response = test_client.post(
            VERIFY_URL, json={"action": "reject", "stateId": 2}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Article state rejected successfully"
        service.reject_state.assert_awaited_once_with(1, 2)

    @pytest.mark.parametrize(
        "payload, message",
        [
            ({"stateId": 2}, "action field is required"),
            ({"action": "maybe", "stateId": 2}, 'action must be either "approve" or "reject"'),
            ({"action": "approve"}, "stateId field is required"),
            ({"action": "approve", "stateId": "two"}, "stateId must be a valid number"),
        ],
    )
    def test_verify_validation(
        self, test_client: TestClient, auth_headers, payload, message
    ) -> None:
        _override(get_state_assignment_service, AsyncMock())

        response = test_client.post(VERIFY_URL, json=payload, headers=auth_headers)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == message

    @pytest.mark.parametrize(
        "error, status_code, code",
        [
            (NotFoundError("AI state assignment not found"), 404, "NOT_FOUND"),
            (AmbiguousDataError("Multiple AI state assignments found"), 400, "AMBIGUOUS_DATA"),
            (ConflictError("State already approved"), 409, "CONFLICT"),
        ],
    )
    def test_verify_error_mapping(
        self, test_client: TestClient, auth_headers, error, status_code, code
    ) -> None:
        service = _override(get_state_assignment_service, AsyncMock())
        service.approve_state.side_effect = error

        response = test_client.post(
            VERIFY_URL, json={"action": "approve", "stateId": 2}, headers=auth_headers
        )

        assert response.status_code == status_code
        body = response.json()["error"]
        assert body["code"] == code
        assert body["message"] == error.message
        assert body["status"] == status_code
        assert body["requestId"]


class TestContentApproval:

    def test_approve_uses_current_user(self, test_client: TestClient, auth_headers) -> None:
        service = _override(get_content_approval_service, AsyncMock())
        service.approve_content.return_value = {"message": "Article 3 approved successfully"}

        response = test_client.post(
            "/api/v1/articles-approveds/human-approve/3", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Article 3 approved successfully"
        service.approve_content.assert_awaited_once_with(3, 1)

    def test_already_approved(self, test_client: TestClient, auth_headers) -> None:
        service = _override(get_content_approval_service, AsyncMock())
        service.approve_content.side_effect = AlreadyApprovedError("Article 3 is already approved")

        response = test_client.post(
            "/api/v1/articles-approveds/human-approve/3", headers=auth_headers
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ALREADY_APPROVED"


class TestReports:

    def test_approved_report(self, test_client: TestClient, auth_headers) -> None:
        service = _override(get_reporting_service, AsyncMock())
        service.list_approved_articles_report.return_value = [
            {"id": 1, "States": [], "ArticleApproveds": [], "stateAbbreviation": ""}
        ]

        response = test_client.get("/api/v1/analysis/llm04/approved", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["articlesArray"][0]["id"] == 1
        assert "timeToRenderResponseFromApiInSeconds" in data


class TestGoogleRss:

    def test_make_request_builds_query_and_returns_items(
        self, test_client: TestClient, auth_headers
    ) -> None:
        fetcher = _override(get_google_rss_fetcher, AsyncMock())
        fetcher.fetch.return_value = [
            ArticleItem(link="https://example.com/a", title="A", description="First")
        ]

        response = test_client.post(
            "/api/v1/google-rss/make-request",
            json={"and_keywords": "fire", "or_keywords": "Ohio, New York", "time_range": "7d"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["query"] == 'fire (Ohio OR "New York") when:7d'
        assert data["timeRangeInvalid"] is False
        assert data["count"] == 1
        assert data["articlesArray"][0]["link"] == "https://example.com/a"
        assert data["url"].startswith(settings.aggregators.google_rss_url)

    def test_make_request_needs_a_term(self, test_client: TestClient, auth_headers) -> None:
        _override(get_google_rss_fetcher, AsyncMock())

        response = test_client.post(
            "/api/v1/google-rss/make-request", json={"time_range": "7d"}, headers=auth_headers
        )

        assert response.status_code == 400

    def test_make_request_rate_limited(self, test_client: TestClient, auth_headers) -> None:
        fetcher = _override(get_google_rss_fetcher, AsyncMock())
        fetcher.fetch.side_effect = RateLimitedError("GoogleRssFetcher returned HTTP 503")

        response = test_client.post(
            "/api/v1/google-rss/make-request", json={"and_keywords": "fire"}, headers=auth_headers
        )

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "UPSTREAM_RATE_LIMITED"

    def test_add_to_database(self, test_client: TestClient, auth_headers) -> None:
        service = _override(get_ingestion_service, AsyncMock())
        service.ensure_aggregator_source_and_entity.return_value = (1, 2)
        service.ingest_batch.return_value = IngestResult(
            request_id=9,
            articles_received=3,
            articles_saved=1,
            article_ids=[5],
            duplicates_skipped=2,
        )
        articles = [
            {"title": f"Story {i}", "link": f"https://example.com/{i}", "description": "d"}
            for i in range(3)
        ]

        response = test_client.post(
            "/api/v1/google-rss/add-to-database",
            json={
                "articlesArray": articles,
                "url": "https://news.google.com/rss/search?q=fire",
                "and_keywords": "fire",
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == (
            "Successfully saved 1 of 3 articles to database (2 duplicates skipped)"
        )
        assert body["data"]["requestId"] == 9
        assert body["data"]["duplicatesSkipped"] == 2
        items, provenance = service.ingest_batch.await_args.args
        assert [item.link for item in items] == [a["link"] for a in articles]
        assert provenance.aggregator_source_id == 1
        assert provenance.entity_who_found_article_id == 2
        assert provenance.and_string == "fire"

    @pytest.mark.parametrize(
        "payload, message",
        [
            ({"articlesArray": [], "url": "u"}, "articlesArray must be a non-empty array"),
            (
                {"articlesArray": [{"title": "t", "link": "l", "description": "d"}]},
                "url is required and must be a string",
            ),
            (
                {"articlesArray": [{"title": "t", "description": "d"}], "url": "u"},
                "Each article must have at least title and link fields",
            ),
            (
                {"articlesArray": [{"title": "t", "link": "l"}], "url": "u"},
                "Each article must have at least one of description or content",
            ),
        ],
    )
    def test_add_to_database_validation(
        self, test_client: TestClient, auth_headers, payload, message
    ) -> None:
        _override(get_ingestion_service, AsyncMock())

        response = test_client.post(
            "/api/v1/google-rss/add-to-database", json=payload, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == message


class TestNewsAggregators:

    def test_outside_requests_disabled(
        self, test_client: TestClient, auth_headers, monkeypatch
    ) -> None:
        monkeypatch.setattr(settings.aggregators, "activate_outside_requests", False)
        service = _override(get_ingestion_service, AsyncMock())

        response = test_client.post(
            "/api/v1/news-api/request",
            json={"startDate": "2025-03-01", "endDate": "2025-03-02", "keywordString": "fire"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["sent"] is False
        assert "q=fire" in data["requestUrl"]
        service.search_and_ingest.assert_not_awaited()

    def test_gnews_request_ingests(
        self, test_client: TestClient, auth_headers, monkeypatch
    ) -> None:
        monkeypatch.setattr(settings.aggregators, "activate_outside_requests", True)
        service = _override(get_ingestion_service, AsyncMock())
        service.ensure_aggregator_source_and_entity.return_value = (3, 4)
        service.search_and_ingest.return_value = IngestResult(
            request_id=11, articles_received=2, articles_saved=2, article_ids=[7, 8]
        )

        response = test_client.post(
            "/api/v1/gnews/request",
            json={"startDate": "2025-03-01", "endDate": "2025-03-02", "keywordString": "fire"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["sent"] is True
        assert data["articleIds"] == [7, 8]
        service.ensure_aggregator_source_and_entity.assert_awaited_once_with("GNews", is_api=True)

    def test_missing_search_fields(self, test_client: TestClient, auth_headers) -> None:
        _override(get_ingestion_service, AsyncMock())

        response = test_client.post(
            "/api/v1/news-api/request", json={"keywordString": "fire"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Missing startDate, endDate"

    @pytest.mark.parametrize(
        "dates, message",
        [
            (
                {"startDate": "03/01/2025", "endDate": "2025-03-02"},
                "startDate must be a date in YYYY-MM-DD format",
            ),
            (
                {"startDate": "2025-03-01", "endDate": "2025-02-30"},
                "endDate must be a date in YYYY-MM-DD format",
            ),
            (
                {"startDate": "2025-03-05", "endDate": "2025-03-02"},
                "startDate must not be after endDate",
            ),
        ],
    )
    def test_bad_dates_are_rejected_before_any_work(
        self, test_client: TestClient, auth_headers, monkeypatch, dates, message
    ) -> None:
        monkeypatch.setattr(settings.aggregators, "activate_outside_requests", True)
        service = _override(get_ingestion_service, AsyncMock())

        response = test_client.post(
            "/api/v1/news-api/request",
            json={**dates, "keywordString": "fire"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == message
        service.ensure_aggregator_source_and_entity.assert_not_awaited()
        service.search_and_ingest.assert_not_awaited()

    def test_search_dates_reach_provenance_as_dates(
        self, test_client: TestClient, auth_headers, monkeypatch
    ) -> None:
        monkeypatch.setattr(settings.aggregators, "activate_outside_requests", True)
        service = _override(get_ingestion_service, AsyncMock())
        service.ensure_aggregator_source_and_entity.return_value = (3, 4)
        service.search_and_ingest.return_value = IngestResult(
            request_id=12, articles_received=0, articles_saved=0
        )

        response = test_client.post(
            "/api/v1/news-api/request",
            json={"startDate": "2025-03-01", "endDate": "2025-03-02", "keywordString": "fire"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        _, params, provenance = service.search_and_ingest.await_args.args
        assert params["from"] == "2025-03-01"
        assert provenance.date_start_of_request == date(2025, 3, 1)
        assert provenance.date_end_of_request == date(2025, 3, 2)

    def test_list_requests(self, test_client: TestClient, auth_headers) -> None:
        service = _override(get_ingestion_service, AsyncMock())
        service.list_requests.return_value = [{"id": 1, "nameOfOrg": "NewsAPI"}]

        response = test_client.get("/api/v1/news-aggregators/requests", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"] == {
            "count": 1,
            "newsApiRequestsArray": [{"id": 1, "nameOfOrg": "NewsAPI"}],
        }
