from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, Enum, func

from tradeshield.database import Base


PATTERN_CATEGORIES = ("urgent", "prepay", "fake", "suspicious_price", "vague_description")
PATTERN_LANGUAGES = ("ko", "en", "ja", "zh")


class FraudPattern(Base):
    """Reference keyword for a known scam tactic (e.g. "선입금" -> prepay)."""
    __tablename__ = "fraud_patterns"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)

    keyword = Column(String, nullable=False, unique=True)
    category = Column(
        Enum(*PATTERN_CATEGORIES, name="pattern_category", native_enum=False), nullable=False
    )
    weight = Column(Integer, nullable=False, default=5)      # 1-10
    description = Column(Text, nullable=True)
    example_texts = Column(JSON, nullable=True)
    language = Column(
        Enum(*PATTERN_LANGUAGES, name="pattern_language", native_enum=False),
        nullable=False,
        default="ko",
    )

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
