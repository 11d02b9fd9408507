"""
Analysis endpoints: listing, seller and image.

Each request runs validate -> analyze -> classify -> persist -> respond, and
fails with a single error envelope at the first step that goes wrong.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tradeshield.api.dependencies import error_response, get_analysis_service, get_db, read_json_body
from tradeshield.schemas.analyze_schemas import (
    AnalyzeImageRequest,
    AnalyzeListingRequest,
    AnalyzeSellerRequest,
)
from tradeshield.services.analysis_service import AnalysisResult, AnalysisService
from tradeshield.services.analysis_store import (
    image_analysis_data,
    listing_analysis_data,
    save_analysis,
    seller_analysis_data,
)
from tradeshield.utils.logging_config import StructuredLogger, metrics
from tradeshield.utils.network import extract_ip_address
from tradeshield.utils.platform import detect_platform
from tradeshield.utils.risk_levels import get_risk_level, image_risk_score

logger = StructuredLogger(__name__)

SAVE_FAILED_ERROR = "Failed to save analysis results"

router = APIRouter(prefix="/api/analyze", tags=["analyze"])


def _analysis_failed(result: AnalysisResult) -> JSONResponse:
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        result.error or "Analysis failed",
    )


def _persist(db: Session, analysis_type: str, **fields) -> Any:
    """
    Insert the analysis row; returns None after rolling back on failure.

    Blocking (a Turso engine makes a network round trip), so routes run it
    in the threadpool.
    """
    try:
        return save_analysis(db, analysis_type=analysis_type, **fields)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Database error", analysis_type=analysis_type, error=str(e), exc_info=True)
        metrics.increment(f"analysis.{analysis_type}.save_failed")
        return None


def _success(data: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_200_OK, content={"success": True, "data": data})


@router.post("/listing")
async def analyze_listing(
    request: Request,
    db: Session = Depends(get_db),
    service: AnalysisService = Depends(get_analysis_service),
):
    """Analyze a trading post for fraud risk."""
    body: AnalyzeListingRequest = await read_json_body(request, AnalyzeListingRequest)

    result = await run_in_threadpool(service.analyze_listing, body)
    if not result.success or not result.data:
        return _analysis_failed(result)

    output = result.data
    risk_level = get_risk_level(output["riskScore"])
    platform = detect_platform(body.url)

    stored = await run_in_threadpool(
        _persist,
        db,
        "listing",
        url=body.url,
        platform=platform,
        risk_score=output["riskScore"],
        warnings=output.get("warnings") or [],
        recommendations=output.get("recommendations") or [],
        reasoning=output.get("reasoning") or "",
        analysis_data=listing_analysis_data(body, output),
        ip_address=extract_ip_address(request.headers),
    )
    if stored is None:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SAVE_FAILED_ERROR)

    logger.info(
        "Listing analyzed",
        analysis_id=stored.id,
        risk_score=output["riskScore"],
        risk_level=risk_level,
        platform=platform,
        schema_valid=result.schema_valid,
    )

    data = {
        "analysisId": stored.id,
        "riskScore": output["riskScore"],
        "riskLevel": risk_level,
        "warnings": output.get("warnings") or [],
        "recommendations": output.get("recommendations") or [],
        "reasoning": output.get("reasoning") or "",
        "detectedPatterns": output.get("detectedPatterns") or [],
    }
    if isinstance(output.get("priceAnalysis"), dict):
        data["priceAnalysis"] = output["priceAnalysis"]
    if output.get("translatedText"):
        data["translatedText"] = output["translatedText"]
    return _success(data)


@router.post("/seller")
async def analyze_seller(
    request: Request,
    db: Session = Depends(get_db),
    service: AnalysisService = Depends(get_analysis_service),
):
    """Assess a seller profile's trustworthiness."""
    body: AnalyzeSellerRequest = await read_json_body(request, AnalyzeSellerRequest)

    result = await run_in_threadpool(service.analyze_seller, body)
    if not result.success or not result.data:
        return _analysis_failed(result)

    output = result.data
    trust_level = get_risk_level(output["trustScore"])
    platform = detect_platform(body.url)
    if platform == "unknown":
        platform = body.platform

    stored = await run_in_threadpool(
        _persist,
        db,
        "seller",
        url=body.url,
        platform=platform,
        risk_score=output["trustScore"],
        warnings=output.get("concerns") or [],
        recommendations=output.get("recommendations") or [],
        reasoning=output.get("reasoning") or "",
        analysis_data=seller_analysis_data(body, output),
        ip_address=extract_ip_address(request.headers),
    )
    if stored is None:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SAVE_FAILED_ERROR)

    logger.info(
        "Seller analyzed",
        analysis_id=stored.id,
        trust_score=output["trustScore"],
        trust_level=trust_level,
        platform=platform,
        schema_valid=result.schema_valid,
    )

    return _success({
        "analysisId": stored.id,
        "trustScore": output["trustScore"],
        "trustLevel": trust_level,
        "strengths": output.get("strengths") or [],
        "concerns": output.get("concerns") or [],
        "recommendations": output.get("recommendations") or [],
        "reasoning": output.get("reasoning") or "",
    })


@router.post("/image")
async def analyze_image(
    request: Request,
    db: Session = Depends(get_db),
    service: AnalysisService = Depends(get_analysis_service),
):
    """Check item photos for authenticity."""
    body: AnalyzeImageRequest = await read_json_body(request, AnalyzeImageRequest)

    result = await run_in_threadpool(service.analyze_image, body)
    if not result.success or not result.data:
        return _analysis_failed(result)

    output = result.data
    risk_score = image_risk_score(output["isAuthentic"], output["confidence"])
    risk_level = get_risk_level(risk_score)
    url = body.image_urls[0]
    platform = detect_platform(url)

    stored = await run_in_threadpool(
        _persist,
        db,
        "image",
        url=url,
        platform=platform,
        risk_score=risk_score,
        warnings=output.get("detectedIssues") or [],
        recommendations=output.get("recommendations") or [],
        reasoning=output.get("reasoning") or "",
        analysis_data=image_analysis_data(body, output),
        ip_address=extract_ip_address(request.headers),
    )
    if stored is None:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SAVE_FAILED_ERROR)

    logger.info(
        "Images analyzed",
        analysis_id=stored.id,
        is_authentic=output["isAuthentic"],
        risk_score=risk_score,
        image_count=len(body.image_urls),
        schema_valid=result.schema_valid,
    )

    return _success({
        "analysisId": stored.id,
        "isAuthentic": output["isAuthentic"],
        "confidence": output["confidence"],
        "riskScore": risk_score,
        "riskLevel": risk_level,
        "detectedIssues": output.get("detectedIssues") or [],
        "observations": output.get("observations") or [],
        "recommendations": output.get("recommendations") or [],
        "reasoning": output.get("reasoning") or "",
    })
