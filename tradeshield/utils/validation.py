"""
Total validation helper.

Wraps pydantic validation so callers get a result object instead of an
exception: one issue per violated constraint, with the offending field path.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError


M = TypeVar("M", bound=BaseModel)


@dataclass
class ValidationResult(Generic[M]):
    success: bool
    data: Optional[M] = None
    issues: List[Dict[str, Any]] = field(default_factory=list)


def format_issues(error: ValidationError) -> List[Dict[str, Any]]:
    """Flatten a pydantic ValidationError into JSON-safe issue dicts."""
    return [
        {
            "path": list(err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in error.errors(include_url=False, include_context=False, include_input=False)
    ]


def validate_payload(model: Type[M], payload: Any) -> ValidationResult[M]:
    """Validate ``payload`` against ``model``. Never raises for bad input."""
    try:
        return ValidationResult(success=True, data=model.model_validate(payload))
    except ValidationError as e:
        return ValidationResult(success=False, issues=format_issues(e))
