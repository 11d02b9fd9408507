from sqlalchemy import Column, Integer, String, Float, DateTime, Enum, func

from tradeshield.database import Base


ITEM_TYPES = ("photocard", "album", "lightstick", "other")
ITEM_CONDITIONS = ("new", "like_new", "used", "unknown")


class PriceHistory(Base):
    """Observed trade price for a merchandise item."""
    __tablename__ = "price_history"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)

    item_name = Column(String, nullable=False)
    item_type = Column(
        Enum(*ITEM_TYPES, name="item_type", native_enum=False),
        nullable=False,
        default="photocard",
    )
    artist = Column(String, nullable=True)

    price = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="KRW")

    source = Column(String, nullable=True)       # "twitter", "instagram", "daangn", ...
    source_url = Column(String, nullable=True)
    condition = Column(
        Enum(*ITEM_CONDITIONS, name="item_condition", native_enum=False),
        nullable=True,
        default="unknown",
    )

    recorded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
