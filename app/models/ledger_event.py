from sqlalchemy import BigInteger, Column, Integer, String, func
from sqlalchemy.dialects.postgresql import TIMESTAMP

from app.database.base import Base


class LedgerEventRow(Base):
    """Outbox entry written in the same transaction as the stage record."""

    __tablename__ = "ledger_events"

    sequence = Column(Integer, primary_key=True, autoincrement=True)
    event = Column(String, nullable=False)  # ProductionRecorded, DistributionRecorded, SalesRecorded
    stage = Column(String, nullable=False)
    trace_number = Column(String, nullable=False, index=True)
    principal_id = Column(String, nullable=False)
    recorded_at = Column(BigInteger, nullable=False)
    status = Column(String, nullable=False, default="pending", index=True)  # pending, delivered
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
