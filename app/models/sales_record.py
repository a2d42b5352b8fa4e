from sqlalchemy import BigInteger, Column, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import TIMESTAMP

from app.database.base import Base


class SalesRow(Base):
    __tablename__ = "sales_records"

    trace_number = Column(String, primary_key=True, index=True)
    # Copied from the distribution record at write time
    food_name = Column(String, nullable=False)
    sale_address = Column(String, nullable=False)
    retailer = Column(String, ForeignKey("principals.principal_id"), nullable=False, index=True)
    recorded_at = Column(BigInteger, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
