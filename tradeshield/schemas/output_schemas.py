"""
Schemas for the structured JSON the model must return.

Each output kind has two halves: a pydantic model used to re-validate the
payload locally, and the strict JSON schema sent as the OpenAI
``response_format``. In the strict schema every property is required, so the
optional fields are declared nullable and a ``null`` means "absent".
"""

import enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


TrustLevel = Literal["low", "medium", "high"]


class FraudPatternCategory(str, enum.Enum):
    """Pattern tags the listing prompt asks the model to use."""
    URGENT_LANGUAGE = "urgent_language"
    PREPAYMENT_DEMAND = "prepayment_demand"
    VAGUE_DESCRIPTION = "vague_description"
    SUSPICIOUS_PRICE = "suspicious_price"
    NO_VERIFICATION = "no_verification"
    POOR_PHOTOS = "poor_photos"
    PRESSURE_TACTICS = "pressure_tactics"
    NEW_ACCOUNT = "new_account"
    NO_PAYMENT_PROTECTION = "no_payment_protection"


class OutputModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_payload(self) -> Dict[str, Any]:
        """Dump with wire names, dropping absent optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class PriceAnalysis(OutputModel):
    is_price_normal: bool = Field(strict=True)
    price_comment: str


class ListingAnalysisOutput(OutputModel):
    risk_score: int = Field(ge=0, le=100, strict=True)
    detected_patterns: List[str]
    warnings: List[str] = Field(min_length=1)
    recommendations: List[str] = Field(min_length=1)
    reasoning: str = Field(min_length=50)
    price_analysis: Optional[PriceAnalysis] = None
    translated_text: Optional[str] = None


class ImageAnalysisOutput(OutputModel):
    is_authentic: bool = Field(strict=True)
    confidence: float = Field(ge=0, le=100, strict=True)
    detected_issues: List[str]
    observations: List[str] = Field(min_length=1)
    recommendations: List[str]
    reasoning: str = Field(min_length=30)


class SellerAnalysisOutput(OutputModel):
    trust_score: int = Field(ge=0, le=100, strict=True)
    trust_level: TrustLevel
    strengths: List[str]
    concerns: List[str]
    recommendations: List[str] = Field(min_length=1)
    reasoning: str = Field(min_length=50)


# ============== OPENAI RESPONSE FORMATS ==============


def _string_list(description: str) -> Dict[str, Any]:
    return {"type": "array", "items": {"type": "string"}, "description": description}


def _strict_object(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


LISTING_ANALYSIS_JSON_SCHEMA = _strict_object({
    "riskScore": {
        "type": "integer",
        "minimum": 0,
        "maximum": 100,
        "description": "Risk score from 0 (safe) to 100 (very dangerous)",
    },
    "detectedPatterns": _string_list(
        'List of detected fraud patterns (e.g., "urgent_language", "prepayment_demand")'
    ),
    "warnings": _string_list(
        "Specific warnings for the user in English, must have at least one warning"
    ),
    "recommendations": _string_list(
        "Actionable safety recommendations, must have at least one recommendation"
    ),
    "reasoning": {
        "type": "string",
        "description": "Detailed explanation of the analysis in English (minimum 50 characters)",
    },
    "priceAnalysis": {
        "anyOf": [
            _strict_object({
                "isPriceNormal": {
                    "type": "boolean",
                    "description": "Whether the price seems normal for the item",
                },
                "priceComment": {
                    "type": "string",
                    "description": "Brief comment about the price",
                },
            }),
            {"type": "null"},
        ],
        "description": "Price analysis if price information was provided, or null if not applicable",
    },
    "translatedText": {
        "anyOf": [{"type": "string"}, {"type": "null"}],
        "description": (
            "English translation of the original Korean text if it was in Korean, "
            "or null if not needed"
        ),
    },
})

IMAGE_ANALYSIS_JSON_SCHEMA = _strict_object({
    "isAuthentic": {
        "type": "boolean",
        "description": "Whether the images appear to show an authentic item",
    },
    "confidence": {
        "type": "number",
        "minimum": 0,
        "maximum": 100,
        "description": "Confidence level of the authenticity assessment (0-100)",
    },
    "detectedIssues": _string_list(
        'List of issues found (e.g., "stock_photo", "heavy_editing", "poor_quality")'
    ),
    "observations": _string_list("Specific observations about the images"),
    "recommendations": _string_list("Recommendations based on image analysis"),
    "reasoning": {
        "type": "string",
        "description": "Detailed reasoning for the assessment (minimum 30 characters)",
    },
})

SELLER_ANALYSIS_JSON_SCHEMA = _strict_object({
    "trustScore": {
        "type": "integer",
        "minimum": 0,
        "maximum": 100,
        "description": "Trust score from 0 (untrustworthy) to 100 (very trustworthy)",
    },
    "trustLevel": {
        "type": "string",
        "enum": ["low", "medium", "high"],
        "description": "Overall trust level categorization",
    },
    "strengths": _string_list("Positive factors about the seller"),
    "concerns": _string_list("Concerns or red flags about the seller"),
    "recommendations": _string_list("Specific recommendations for dealing with this seller"),
    "reasoning": {
        "type": "string",
        "description": "Detailed explanation of the trust assessment (minimum 50 characters)",
    },
})


def response_format(name: str, schema: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap a JSON schema as an OpenAI strict structured-output response_format."""
    return {
        "type": "json_schema",
        "json_schema": {
            "name": name,
            "strict": True,
            "schema": schema,
        },
    }
