from sqlalchemy import BigInteger, Column, String, func
from sqlalchemy.dialects.postgresql import TIMESTAMP

from app.database.base import Base


class PrincipalRow(Base):
    """Registered ledger participant. Never updated or deleted once written."""

    __tablename__ = "principals"

    principal_id = Column(String, primary_key=True, index=True)
    display_name = Column(String, nullable=False)
    organization = Column(String, nullable=False)
    role = Column(String, nullable=False, index=True)  # Producer, Distributor, Retailer
    registered_by = Column(String, nullable=False)
    registered_at = Column(BigInteger, nullable=False)  # ledger time, epoch seconds
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
