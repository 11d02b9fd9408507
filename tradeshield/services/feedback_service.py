"""
Feedback service for tracking how analyses held up against real trades.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from tradeshield.models.analysis import Analysis
from tradeshield.models.feedback import ActualOutcome, UserFeedback


def submit_feedback(
    db: Session,
    analysis_id: int,
    was_accurate: bool,
    actual_outcome: str,
    comments: Optional[str] = None,
) -> Optional[UserFeedback]:
    """
    Store feedback for an analysis.

    Returns None when the referenced analysis does not exist.
    """
    if db.get(Analysis, analysis_id) is None:
        return None

    feedback = UserFeedback(
        analysis_id=analysis_id,
        was_accurate=was_accurate,
        actual_outcome=actual_outcome,
        comments=comments,
    )

    db.add(feedback)
    db.commit()
    db.refresh(feedback)

    return feedback


def get_feedback_stats(db: Session, days: int = 30) -> Dict[str, Any]:
    """Accuracy of stored analyses according to user feedback."""
    since = datetime.now(timezone.utc) - timedelta(days=days)

    query = db.query(UserFeedback).filter(UserFeedback.created_at >= since)
    total = query.count()

    outcomes = {outcome.value: 0 for outcome in ActualOutcome}
    if total == 0:
        return {
            "period_days": days,
            "total_feedback": 0,
            "accurate": 0,
            "inaccurate": 0,
            "accuracy": 0.0,
            "outcomes": outcomes,
        }

    accurate = query.filter(UserFeedback.was_accurate.is_(True)).count()
    inaccurate = query.filter(UserFeedback.was_accurate.is_(False)).count()

    rows = (
        query.with_entities(UserFeedback.actual_outcome, func.count(UserFeedback.id))
        .group_by(UserFeedback.actual_outcome)
        .all()
    )
    for outcome, count in rows:
        if outcome is not None:
            outcomes[outcome] = count

    return {
        "period_days": days,
        "total_feedback": total,
        "accurate": accurate,
        "inaccurate": inaccurate,
        "accuracy": round(accurate / total, 4),
        "outcomes": outcomes,
    }
