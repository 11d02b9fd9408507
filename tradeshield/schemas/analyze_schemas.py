"""
Inbound request schemas for the analysis and feedback endpoints.

Wire names are camelCase; unknown fields are rejected rather than ignored.
Optional fields may be omitted but not sent as null: they are typed without
None and default to it, and pydantic leaves defaults unvalidated.
"""

from typing import Annotated, List, Literal

from pydantic import AfterValidator, AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel


Platform = Literal["twitter", "instagram", "unknown"]
AnalysisType = Literal["listing", "seller", "image"]
ItemCondition = Literal["new", "like_new", "used", "unknown"]
ActualOutcome = Literal["safe_transaction", "scam_detected", "price_issue", "other"]

_url_adapter = TypeAdapter(AnyUrl)


def _check_url(value: str) -> str:
    # Validate as a URL but keep the submitted string verbatim (AnyUrl normalizes)
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        raise ValueError("Please enter a valid URL")
    return value


UrlStr = Annotated[str, AfterValidator(_check_url)]


class RequestModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class AnalyzeListingRequest(RequestModel):
    url: UrlStr
    text: str = Field(min_length=1, max_length=10000)
    images: List[UrlStr] = Field(default_factory=list)
    price: float = Field(default=None, gt=0, strict=True, allow_inf_nan=False)
    item_name: str = None


class AnalyzeSellerRequest(RequestModel):
    url: UrlStr
    username: str = Field(min_length=1, max_length=100)
    platform: Platform
    account_age: int = Field(default=None, gt=0, strict=True)  # days since creation
    follower_count: int = Field(default=None, ge=0, strict=True)
    following_count: int = Field(default=None, ge=0, strict=True)
    post_count: int = Field(default=None, ge=0, strict=True)
    bio: str = Field(default=None, max_length=2000)
    recent_activity: str = Field(default=None, max_length=5000)


class AnalyzeImageRequest(RequestModel):
    image_urls: List[UrlStr] = Field(min_length=1, max_length=10)
    item_name: str = None
    expected_condition: ItemCondition = None


class SubmitFeedbackRequest(RequestModel):
    """Feedback on a stored analysis once the trade has played out."""
    analysis_id: int = Field(gt=0, strict=True)
    was_accurate: bool = Field(strict=True)
    actual_outcome: ActualOutcome
    comments: str = Field(default=None, max_length=1000)


class FeedbackStats(BaseModel):
    period_days: int
    total_feedback: int
    accurate: int
    inaccurate: int
    accuracy: float
    outcomes: dict
