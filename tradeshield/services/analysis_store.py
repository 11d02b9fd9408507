"""
Persistence for completed analyses.

Each successful end-to-end request writes exactly one row; rows are never
updated afterwards.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from tradeshield.models.analysis import Analysis
from tradeshield.schemas.analyze_schemas import (
    AnalyzeImageRequest,
    AnalyzeListingRequest,
    AnalyzeSellerRequest,
)
from tradeshield.utils.risk_levels import get_risk_level


def save_analysis(
    db: Session,
    url: str,
    platform: str,
    analysis_type: str,
    risk_score: int,
    warnings: List[str],
    recommendations: List[str],
    reasoning: str,
    analysis_data: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
) -> Analysis:
    """
    Insert one analysis row and return it with its id populated.

    SQLAlchemy errors propagate; the caller owns rollback and the error
    response.
    """
    analysis = Analysis(
        url=url,
        platform=platform,
        analysis_type=analysis_type,
        risk_score=risk_score,
        warnings=warnings,
        recommendations=recommendations,
        reasoning=reasoning,
        analysis_data=analysis_data,
        ip_address=ip_address,
    )

    db.add(analysis)
    db.commit()
    db.refresh(analysis)

    return analysis


def listing_analysis_data(request: AnalyzeListingRequest, output: Dict[str, Any]) -> Dict[str, Any]:
    data: Dict[str, Any] = {"detectedPatterns": output.get("detectedPatterns") or []}

    # Lenient output may carry a malformed priceAnalysis; only an object is kept
    price_analysis = output.get("priceAnalysis")
    if isinstance(price_analysis, dict):
        data["priceAnalysis"] = {
            "inputPrice": request.price,
            "isPriceNormal": price_analysis.get("isPriceNormal"),
            "priceComment": price_analysis.get("priceComment"),
        }

    if output.get("translatedText"):
        data["translatedText"] = output["translatedText"]

    return data


def image_analysis_data(request: AnalyzeImageRequest, output: Dict[str, Any]) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "imageAnalysis": {
            "isAuthentic": output.get("isAuthentic"),
            "isPotentialFake": not output.get("isAuthentic"),
            "confidence": output.get("confidence"),
            "detectedIssues": output.get("detectedIssues") or [],
            "observations": output.get("observations") or [],
        },
        "imageCount": len(request.image_urls),
    }
    if request.item_name:
        data["itemName"] = request.item_name
    if request.expected_condition:
        data["expectedCondition"] = request.expected_condition
    return data


def seller_analysis_data(request: AnalyzeSellerRequest, output: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "username": request.username,
        "trustLevel": get_risk_level(output["trustScore"]),
        "reportedTrustLevel": output.get("trustLevel"),
        "strengths": output.get("strengths") or [],
        "concerns": output.get("concerns") or [],
    }
