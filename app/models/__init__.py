"""SQLAlchemy models for the food trace ledger."""

from .principal import PrincipalRow
from .production_record import ProductionRow
from .distribution_record import DistributionRow
from .sales_record import SalesRow
from .trace_summary import TraceSummaryRow
from .ledger_event import LedgerEventRow

__all__ = [
    "PrincipalRow",
    "ProductionRow",
    "DistributionRow",
    "SalesRow",
    "TraceSummaryRow",
    "LedgerEventRow",
]
