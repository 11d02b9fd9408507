"""Tests for the FastAPI endpoints."""

from unittest.mock import MagicMock

import pytest
from openai import OpenAIError
from sqlalchemy.exc import OperationalError

from tradeshield.api import analyze as analyze_api
from tradeshield.api.dependencies import get_db
from tradeshield.api.server import app
from tradeshield.models.analysis import Analysis


class TestHealthEndpoint:

    def test_health_returns_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "X-Request-ID" in response.headers

    def test_status_reports_configuration(self, client, make_service, use_service):
        service, _ = make_service(configured=False)
        use_service(service)

        data = client.get("/status").json()
        assert data["openai_configured"] is False
        assert "metrics" in data


class TestAnalyzeListing:

    def test_high_risk_listing_end_to_end(
        self, client, db_session, make_service, use_service, listing_output, sample_listing_request
    ):
        service, _ = make_service(content=listing_output)
        use_service(service)

        response = client.post(
            "/api/analyze/listing",
            json=sample_listing_request,
            headers={"x-forwarded-for": "203.0.113.7, 10.0.0.1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["riskScore"] == 85
        assert body["data"]["riskLevel"] == "high"
        assert "urgent_language" in body["data"]["detectedPatterns"]
        assert body["data"]["priceAnalysis"]["isPriceNormal"] is False

        stored = db_session.query(Analysis).one()
        assert stored.id == body["data"]["analysisId"]
        assert stored.platform == "twitter"
        assert stored.analysis_type == "listing"
        assert stored.risk_score == 85
        assert stored.ip_address == "203.0.113.7"
        assert stored.warnings == listing_output["warnings"]
        assert stored.analysis_data["priceAnalysis"]["inputPrice"] == 3000
        assert stored.created_at is not None

    def test_low_risk_listing(self, client, make_service, use_service, listing_output):
        service, _ = make_service(content={**listing_output, "riskScore": 15, "priceAnalysis": None})
        use_service(service)

        response = client.post(
            "/api/analyze/listing",
            json={"url": "https://example.com/post/1", "text": "BTS 포토카드 양도합니다."},
        )

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["riskLevel"] == "low"
        assert "priceAnalysis" not in data

    def test_malformed_json(self, client):
        response = client.post(
            "/api/analyze/listing",
            content="invalid json{",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid JSON"}

    def test_validation_failure_has_details(self, client):
        response = client.post(
            "/api/analyze/listing",
            json={"url": "not-a-valid-url", "text": "포토카드 양도", "price": 0},
        )

        body = response.json()
        assert response.status_code == 400
        assert body["success"] is False
        assert body["error"] == "Validation failed"
        assert {tuple(d["path"]) for d in body["details"]} == {("url",), ("price",)}

    def test_text_too_long(self, client):
        response = client.post(
            "/api/analyze/listing",
            json={"url": "https://twitter.com/user/status/123", "text": "a" * 10001},
        )
        assert response.status_code == 400

    def test_upstream_failure(self, client, db_session, make_service, use_service, sample_listing_request):
        service, _ = make_service(error=OpenAIError("API rate limit exceeded"))
        use_service(service)

        response = client.post("/api/analyze/listing", json=sample_listing_request)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "API rate limit exceeded"}
        assert db_session.query(Analysis).count() == 0

    def test_missing_api_key(self, client, make_service, use_service, sample_listing_request):
        service, _ = make_service(configured=False)
        use_service(service)

        response = client.post("/api/analyze/listing", json=sample_listing_request)

        assert response.status_code == 500
        assert "OpenAI API key" in response.json()["error"]

    def test_save_failure_reported(self, client, make_service, use_service, listing_output, sample_listing_request):
        service, _ = make_service(content=listing_output)
        use_service(service)
        broken = MagicMock()
        broken.commit.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))
        app.dependency_overrides[get_db] = lambda: broken

        response = client.post("/api/analyze/listing", json=sample_listing_request)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to save analysis results"}
        broken.rollback.assert_called_once()

    def test_identical_requests_store_two_rows(
        self, client, db_session, make_service, use_service, listing_output, sample_listing_request
    ):
        service, _ = make_service(content=listing_output)
        use_service(service)

        first = client.post("/api/analyze/listing", json=sample_listing_request).json()
        second = client.post("/api/analyze/listing", json=sample_listing_request).json()

        assert first["data"]["analysisId"] != second["data"]["analysisId"]
        assert db_session.query(Analysis).count() == 2

    def test_lenient_output_still_succeeds(
        self, client, make_service, use_service, listing_output, sample_listing_request
    ):
        service, _ = make_service(content={**listing_output, "reasoning": "Too short."})
        use_service(service)

        response = client.post("/api/analyze/listing", json=sample_listing_request)

        assert response.status_code == 200
        assert response.json()["data"]["reasoning"] == "Too short."

    def test_lenient_output_with_malformed_price_analysis(
        self, client, db_session, make_service, use_service, listing_output, sample_listing_request
    ):
        service, _ = make_service(content={**listing_output, "priceAnalysis": "Too cheap"})
        use_service(service)

        response = client.post("/api/analyze/listing", json=sample_listing_request)

        assert response.status_code == 200
        assert "priceAnalysis" not in response.json()["data"]
        stored = db_session.query(Analysis).one()
        assert "priceAnalysis" not in stored.analysis_data

    @pytest.mark.parametrize("token", ["Infinity", "-Infinity", "NaN"])
    def test_non_standard_number_tokens_are_invalid_json(self, client, token):
        response = client.post(
            "/api/analyze/listing",
            content=f'{{"url": "https://twitter.com/user/status/123", "text": "hi", "price": {token}}}',
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid JSON"}

    def test_overflowing_price_rejected(self, client):
        response = client.post(
            "/api/analyze/listing",
            content='{"url": "https://twitter.com/user/status/123", "text": "hi", "price": 1e999}',
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["details"][0]["path"] == ["price"]

    def test_null_optional_field_rejected(self, client):
        response = client.post(
            "/api/analyze/listing",
            json={"url": "https://twitter.com/user/status/123", "text": "hi", "price": None},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_insert_runs_in_threadpool(
        self, client, monkeypatch, make_service, use_service, listing_output, sample_listing_request
    ):
        service, _ = make_service(content=listing_output)
        use_service(service)
        dispatched = []
        real_run_in_threadpool = analyze_api.run_in_threadpool

        async def recording_run_in_threadpool(func, *args, **kwargs):
            dispatched.append(func.__name__)
            return await real_run_in_threadpool(func, *args, **kwargs)

        monkeypatch.setattr(analyze_api, "run_in_threadpool", recording_run_in_threadpool)

        response = client.post("/api/analyze/listing", json=sample_listing_request)

        assert response.status_code == 200
        assert dispatched == ["analyze_listing", "_persist"]

    def test_other_methods_not_allowed(self, client):
        for method in ("get", "put", "delete"):
            response = getattr(client, method)("/api/analyze/listing")
            assert response.status_code == 405
            assert response.json() == {"error": "Method not allowed"}


class TestAnalyzeSeller:

    def test_seller_analysis(self, client, db_session, make_service, use_service, seller_output):
        service, _ = make_service(content={**seller_output, "trustLevel": "medium"})
        use_service(service)

        response = client.post("/api/analyze/seller", json={
            "url": "https://www.instagram.com/kpop_seller",
            "username": "kpop_seller",
            "platform": "instagram",
            "accountAge": 800,
            "followerCount": 1200,
        })

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["trustScore"] == 72
        assert data["trustLevel"] == "high"

        stored = db_session.query(Analysis).one()
        assert stored.analysis_type == "seller"
        assert stored.platform == "instagram"
        assert stored.analysis_data["reportedTrustLevel"] == "medium"

    def test_declared_platform_used_when_url_unknown(
        self, client, db_session, make_service, use_service, seller_output
    ):
        service, _ = make_service(content=seller_output)
        use_service(service)

        client.post("/api/analyze/seller", json={
            "url": "https://t.co/abc",
            "username": "kpop_seller",
            "platform": "twitter",
        })

        assert db_session.query(Analysis).one().platform == "twitter"

    def test_unknown_field_rejected(self, client):
        response = client.post("/api/analyze/seller", json={
            "url": "https://x.com/seller",
            "username": "seller",
            "platform": "twitter",
            "rating": 5,
        })
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"


class TestAnalyzeImage:

    def test_image_analysis(self, client, db_session, make_service, use_service, image_output):
        service, _ = make_service(content=image_output)
        use_service(service)

        response = client.post("/api/analyze/image", json={
            "imageUrls": ["https://pbs.twimg.com/media/abc.jpg"],
            "itemName": "BTS photocard",
            "expectedCondition": "new",
        })

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["isAuthentic"] is False
        assert data["riskScore"] == 80
        assert data["riskLevel"] == "high"

        stored = db_session.query(Analysis).one()
        assert stored.analysis_type == "image"
        assert stored.url == "https://pbs.twimg.com/media/abc.jpg"
        assert stored.analysis_data["imageAnalysis"]["isPotentialFake"] is True

    def test_too_many_images(self, client):
        urls = [f"https://example.com/{i}.jpg" for i in range(11)]
        response = client.post("/api/analyze/image", json={"imageUrls": urls})
        assert response.status_code == 400
