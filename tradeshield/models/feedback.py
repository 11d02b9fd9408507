"""
Feedback model for checking analysis results against real trade outcomes.
"""

import enum

from sqlalchemy import Column, Integer, Boolean, Text, DateTime, ForeignKey, Enum, func

from tradeshield.database import Base


class ActualOutcome(str, enum.Enum):
    SAFE_TRANSACTION = "safe_transaction"
    SCAM_DETECTED = "scam_detected"
    PRICE_ISSUE = "price_issue"
    OTHER = "other"


class UserFeedback(Base):
    """User feedback on an analysis result."""
    __tablename__ = "user_feedback"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)

    analysis_id = Column(
        Integer,
        ForeignKey("analyses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    was_accurate = Column(Boolean, nullable=True)
    actual_outcome = Column(
        Enum(
            *[o.value for o in ActualOutcome],
            name="actual_outcome",
            native_enum=False,
        ),
        nullable=True,
    )
    comments = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
