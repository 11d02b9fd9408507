import json
from functools import lru_cache
from typing import Any, Type

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from tradeshield.config import settings
from tradeshield.database import SessionLocal
from tradeshield.services.analysis_service import AnalysisService
from tradeshield.services.llm_client import LLMClient
from tradeshield.utils.validation import ValidationResult, validate_payload


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@lru_cache
def get_analysis_service() -> AnalysisService:
    """Process-wide service; override through app.dependency_overrides in tests."""
    return AnalysisService(
        llm=LLMClient.from_settings(settings),
        strict_output=settings.strict_output_validation,
    )


def _reject_constant(token: str) -> Any:
    # NaN, Infinity and -Infinity are not JSON
    raise ValueError(f"Invalid JSON token: {token}")


def error_response(status_code: int, error: str, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, **extra},
    )


class BodyError(Exception):
    """Raised when a request body cannot be parsed or validated."""

    def __init__(self, response: JSONResponse):
        self.response = response


async def read_json_body(request: Request, model: Type[BaseModel]) -> BaseModel:
    """
    Parse and validate the JSON body against ``model``.

    Raises BodyError carrying the ready-made 400 response.
    """
    raw = await request.body()
    try:
        payload = json.loads(raw, parse_constant=_reject_constant)
    except ValueError:
        raise BodyError(error_response(status.HTTP_400_BAD_REQUEST, "Invalid JSON"))

    result: ValidationResult = validate_payload(model, payload)
    if not result.success:
        raise BodyError(
            error_response(
                status.HTTP_400_BAD_REQUEST,
                "Validation failed",
                details=result.issues,
            )
        )
    return result.data
