from sqlalchemy import BigInteger, Column, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import TIMESTAMP

from app.database.base import Base


class ProductionRow(Base):
    __tablename__ = "production_records"

    trace_number = Column(String, primary_key=True, index=True)
    food_name = Column(String, nullable=False)
    origin_address = Column(String, nullable=False)
    quality = Column(BigInteger, nullable=False)
    producer = Column(String, ForeignKey("principals.principal_id"), nullable=False, index=True)
    recorded_at = Column(BigInteger, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
