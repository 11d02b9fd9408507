"""
Analysis invoker: one OpenAI call per request, re-validated locally.

Every outcome is reported as an AnalysisResult; upstream failures never
escape as exceptions.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type

from openai import OpenAIError
from pydantic import BaseModel

from tradeshield.schemas.analyze_schemas import (
    AnalyzeImageRequest,
    AnalyzeListingRequest,
    AnalyzeSellerRequest,
)
from tradeshield.schemas.output_schemas import (
    IMAGE_ANALYSIS_JSON_SCHEMA,
    LISTING_ANALYSIS_JSON_SCHEMA,
    SELLER_ANALYSIS_JSON_SCHEMA,
    ImageAnalysisOutput,
    ListingAnalysisOutput,
    SellerAnalysisOutput,
    response_format,
)
from tradeshield.services.llm_client import LLMClient, MessageContent
from tradeshield.services.prompts import (
    FRAUD_DETECTION_SYSTEM_PROMPT,
    IMAGE_ANALYSIS_SYSTEM_PROMPT,
    SELLER_ANALYSIS_SYSTEM_PROMPT,
    build_image_message,
    build_listing_message,
    build_seller_message,
)
from tradeshield.utils.logging_config import StructuredLogger, track_analysis
from tradeshield.utils.validation import validate_payload

logger = StructuredLogger(__name__)

NOT_CONFIGURED_ERROR = "OpenAI API key is not configured"
NO_CONTENT_ERROR = "No response content from OpenAI"
UNPARSEABLE_ERROR = "Failed to parse analysis result"
SCHEMA_MISMATCH_ERROR = "Analysis result did not match the expected schema"
UNKNOWN_ERROR = "Unknown error occurred"


@dataclass
class AnalysisResult:
    success: bool
    data: Optional[Dict[str, Any]] = None  # camelCase payload
    error: Optional[str] = None
    schema_valid: bool = True
    issues: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, issues: Optional[List[Dict[str, Any]]] = None) -> "AnalysisResult":
        return cls(success=False, error=error, issues=issues or [])


def _is_score(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 100


def _listing_bucketable(payload: Dict[str, Any]) -> bool:
    return _is_score(payload.get("riskScore"))


def _seller_bucketable(payload: Dict[str, Any]) -> bool:
    return _is_score(payload.get("trustScore"))


def _image_bucketable(payload: Dict[str, Any]) -> bool:
    confidence = payload.get("confidence")
    return (
        isinstance(payload.get("isAuthentic"), bool)
        and isinstance(confidence, (int, float))
        and not isinstance(confidence, bool)
        and 0 <= confidence <= 100
    )


class AnalysisService:
    """
    Runs listing, seller and image analyses against the injected LLM client.

    Output that fails local re-validation is passed through as a success by
    default: the request already asked OpenAI for strict schema-constrained
    output, so the anomaly is logged rather than surfaced. The payload must
    still carry a usable score. Set ``strict_output`` to reject every
    anomaly instead.
    """

    def __init__(self, llm: LLMClient, strict_output: bool = False):
        self.llm = llm
        self.strict_output = strict_output

    @track_analysis("listing")
    def analyze_listing(self, request: AnalyzeListingRequest) -> AnalysisResult:
        return self._run(
            kind="listing",
            system_prompt=FRAUD_DETECTION_SYSTEM_PROMPT,
            user_content=build_listing_message(request),
            schema_name="listing_analysis",
            json_schema=LISTING_ANALYSIS_JSON_SCHEMA,
            output_model=ListingAnalysisOutput,
            bucketable=_listing_bucketable,
        )

    @track_analysis("seller")
    def analyze_seller(self, request: AnalyzeSellerRequest) -> AnalysisResult:
        return self._run(
            kind="seller",
            system_prompt=SELLER_ANALYSIS_SYSTEM_PROMPT,
            user_content=build_seller_message(request),
            schema_name="seller_analysis",
            json_schema=SELLER_ANALYSIS_JSON_SCHEMA,
            output_model=SellerAnalysisOutput,
            bucketable=_seller_bucketable,
        )

    @track_analysis("image")
    def analyze_image(self, request: AnalyzeImageRequest) -> AnalysisResult:
        if not request.image_urls:
            return AnalysisResult.failure("At least one image URL is required")

        # Text prompt first, then the images themselves for the vision model
        user_content: List[Dict[str, Any]] = [
            {"type": "text", "text": build_image_message(request)},
        ]
        for image_url in request.image_urls:
            user_content.append({
                "type": "image_url",
                "image_url": {"url": image_url, "detail": "high"},
            })

        return self._run(
            kind="image",
            system_prompt=IMAGE_ANALYSIS_SYSTEM_PROMPT,
            user_content=user_content,
            schema_name="image_analysis",
            json_schema=IMAGE_ANALYSIS_JSON_SCHEMA,
            output_model=ImageAnalysisOutput,
            bucketable=_image_bucketable,
        )

    def _run(
        self,
        kind: str,
        system_prompt: str,
        user_content: MessageContent,
        schema_name: str,
        json_schema: Dict[str, Any],
        output_model: Type[BaseModel],
        bucketable: Callable[[Dict[str, Any]], bool],
    ) -> AnalysisResult:
        if not self.llm.is_configured:
            return AnalysisResult.failure(NOT_CONFIGURED_ERROR)

        try:
            content = self.llm.complete_structured(
                system_prompt=system_prompt,
                user_content=user_content,
                response_format=response_format(schema_name, json_schema),
            )
        except OpenAIError as e:
            logger.error(f"Error analyzing {kind}", error=str(e), error_type=type(e).__name__)
            return AnalysisResult.failure(str(e) or UNKNOWN_ERROR)

        if not content:
            return AnalysisResult.failure(NO_CONTENT_ERROR)

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"Unparseable {kind} analysis content", error=str(e))
            return AnalysisResult.failure(UNPARSEABLE_ERROR)

        if not isinstance(payload, dict):
            return AnalysisResult.failure(UNPARSEABLE_ERROR)

        validation = validate_payload(output_model, payload)
        if validation.success:
            return AnalysisResult(success=True, data=validation.data.to_payload())

        logger.warning(
            f"{kind} analysis output failed schema validation",
            issues=validation.issues,
            strict=self.strict_output,
        )

        if self.strict_output or not bucketable(payload):
            return AnalysisResult.failure(SCHEMA_MISMATCH_ERROR, validation.issues)

        return AnalysisResult(
            success=True,
            data=payload,
            schema_valid=False,
            issues=validation.issues,
        )
