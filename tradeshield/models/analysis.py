from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, Enum, func

from tradeshield.database import Base


PLATFORMS = ("twitter", "instagram", "unknown")
ANALYSIS_TYPES = ("listing", "seller", "image")


class Analysis(Base):
    """One stored analysis. Rows are inserted once and never updated."""
    __tablename__ = "analyses"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)

    url = Column(String, nullable=False)
    platform = Column(Enum(*PLATFORMS, name="platform", native_enum=False), nullable=False)
    analysis_type = Column(
        Enum(*ANALYSIS_TYPES, name="analysis_type", native_enum=False), nullable=False
    )

    risk_score = Column(Integer, nullable=False)              # 0-100; trust score for sellers
    warnings = Column(JSON, nullable=True)                    # ["Prepayment requested", ...]
    recommendations = Column(JSON, nullable=True)
    reasoning = Column(Text, nullable=True)
    analysis_data = Column(JSON, nullable=True)               # kind-specific derived fields

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    ip_address = Column(String, nullable=True)
