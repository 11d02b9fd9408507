"""
Risk level utilities.

The same cut points bucket listing/image risk scores and seller trust
scores (0-100 scale).
"""

from typing import Literal

RiskLevel = Literal["low", "medium", "high"]

MEDIUM_THRESHOLD = 30  # Score >= this = MEDIUM
HIGH_THRESHOLD = 70  # Score >= this = HIGH


def get_risk_level(score: int) -> RiskLevel:
    """
    Derive the three-way bucket from a score.

    The score must already be validated to 0-100; out-of-range values are
    bucketed without complaint.
    """
    if score < MEDIUM_THRESHOLD:
        return "low"
    elif score < HIGH_THRESHOLD:
        return "medium"
    else:
        return "high"


def image_risk_score(is_authentic: bool, confidence: float) -> int:
    """
    Express an authenticity verdict as a 0-100 risk score.

    A confident "authentic" verdict is low risk; a confident "not authentic"
    verdict is high risk.
    """
    score = 100 - confidence if is_authentic else confidence
    return int(round(min(100.0, max(0.0, score))))
