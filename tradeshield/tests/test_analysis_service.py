"""Tests for the analysis invoker against a fake OpenAI client."""

from openai import OpenAIError

from tradeshield.schemas.analyze_schemas import (
    AnalyzeImageRequest,
    AnalyzeListingRequest,
    AnalyzeSellerRequest,
)
from tradeshield.services.analysis_service import (
    NO_CONTENT_ERROR,
    NOT_CONFIGURED_ERROR,
    SCHEMA_MISMATCH_ERROR,
    UNPARSEABLE_ERROR,
)
from tradeshield.utils.logging_config import metrics


LISTING = AnalyzeListingRequest(
    url="https://twitter.com/user/status/123",
    text="포토카드 양도합니다! 급해요! 선입금만 받아요",
    price=3000,
)


class TestListingAnalysis:

    def test_success(self, make_service, listing_output):
        service, _ = make_service(content=listing_output)
        result = service.analyze_listing(LISTING)

        assert result.success
        assert result.schema_valid
        assert result.data["riskScore"] == 85
        assert result.data["detectedPatterns"] == ["urgent_language", "prepayment_demand"]
        assert "translatedText" not in result.data

    def test_request_uses_strict_schema(self, make_service, listing_output):
        service, fake = make_service(content=listing_output)
        service.analyze_listing(LISTING)

        call = fake.completions.calls[0]
        assert call["model"] == "gpt-4o"
        assert call["response_format"]["type"] == "json_schema"
        assert call["response_format"]["json_schema"]["name"] == "listing_analysis"
        assert call["response_format"]["json_schema"]["strict"] is True
        assert call["messages"][0]["role"] == "system"
        assert "## Trading Post Content" in call["messages"][1]["content"]

    def test_not_configured(self, make_service):
        service, _ = make_service(configured=False)
        result = service.analyze_listing(LISTING)

        assert not result.success
        assert result.error == NOT_CONFIGURED_ERROR

    def test_upstream_error_message_passed_through(self, make_service):
        service, _ = make_service(error=OpenAIError("API rate limit exceeded"))
        result = service.analyze_listing(LISTING)

        assert not result.success
        assert result.error == "API rate limit exceeded"

    def test_empty_content(self, make_service):
        service, _ = make_service(content="")
        result = service.analyze_listing(LISTING)

        assert not result.success
        assert result.error == NO_CONTENT_ERROR

    def test_unparseable_content(self, make_service):
        service, _ = make_service(content="not json{")
        result = service.analyze_listing(LISTING)

        assert not result.success
        assert result.error == UNPARSEABLE_ERROR

    def test_non_object_content(self, make_service):
        service, _ = make_service(content="[1, 2]")
        assert service.analyze_listing(LISTING).error == UNPARSEABLE_ERROR

    def test_schema_anomaly_passed_through_by_default(self, make_service, listing_output):
        service, _ = make_service(content={**listing_output, "warnings": []})
        result = service.analyze_listing(LISTING)

        assert result.success
        assert not result.schema_valid
        assert result.issues[0]["path"] == ["warnings"]
        assert result.data["warnings"] == []

    def test_schema_anomaly_rejected_in_strict_mode(self, make_service, listing_output):
        service, _ = make_service(content={**listing_output, "warnings": []}, strict_output=True)
        result = service.analyze_listing(LISTING)

        assert not result.success
        assert result.error == SCHEMA_MISMATCH_ERROR
        assert result.issues

    def test_anomaly_without_usable_score_fails(self, make_service, listing_output):
        payload = dict(listing_output)
        payload.pop("riskScore")
        service, _ = make_service(content=payload)
        result = service.analyze_listing(LISTING)

        assert not result.success
        assert result.error == SCHEMA_MISMATCH_ERROR

    def test_metrics_counted(self, make_service, listing_output):
        metrics.reset()
        service, _ = make_service(content=listing_output)
        service.analyze_listing(LISTING)
        failing, _ = make_service(error=OpenAIError("boom"))
        failing.analyze_listing(LISTING)

        counters = metrics.get_stats()["counters"]
        assert counters["analysis.listing.total"] == 2
        assert counters["analysis.listing.failed"] == 1


class TestSellerAnalysis:

    def test_success(self, make_service, seller_output):
        service, fake = make_service(content=seller_output)
        request = AnalyzeSellerRequest(
            url="https://instagram.com/seller", username="seller", platform="instagram", account_age=800,
        )
        result = service.analyze_seller(request)

        assert result.success
        assert result.data["trustScore"] == 72
        assert result.data["concerns"] == []
        assert fake.completions.calls[0]["response_format"]["json_schema"]["name"] == "seller_analysis"


class TestImageAnalysis:

    def test_images_attached_as_content_parts(self, make_service, image_output):
        service, fake = make_service(content=image_output)
        request = AnalyzeImageRequest(
            image_urls=["https://example.com/1.jpg", "https://example.com/2.jpg"],
            item_name="Photocard",
        )
        result = service.analyze_image(request)

        assert result.success
        assert result.data["isAuthentic"] is False
        content = fake.completions.calls[0]["messages"][1]["content"]
        assert content[0]["type"] == "text"
        assert "## Number of Images\n2" in content[0]["text"]
        assert [part["image_url"]["url"] for part in content[1:]] == [
            "https://example.com/1.jpg",
            "https://example.com/2.jpg",
        ]

    def test_requires_images(self, make_service, image_output):
        service, fake = make_service(content=image_output)
        request = AnalyzeImageRequest.model_construct(image_urls=[], item_name=None, expected_condition=None)
        result = service.analyze_image(request)

        assert not result.success
        assert result.error == "At least one image URL is required"
        assert fake.completions.calls == []
