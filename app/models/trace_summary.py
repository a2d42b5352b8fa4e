from sqlalchemy import Column, String, func
from sqlalchemy.dialects.postgresql import TIMESTAMP

from app.database.base import Base


class TraceSummaryRow(Base):
    """Human-readable trace view. Derived at production time or curated by an admin."""

    __tablename__ = "trace_summaries"

    trace_number = Column(String, primary_key=True, index=True)
    food_name = Column(String, nullable=False)
    origin_address = Column(String, nullable=False)
    produced_at = Column(String, nullable=False)
    producer_label = Column(String, nullable=False)
    quality = Column(String, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
