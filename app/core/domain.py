"""Ledger domain types: roles, stages, policies and the immutable records.

Records are frozen pydantic models so that a value handed out by a store can
never be mutated behind the ledger's back. ORM rows convert into them via
``from_attributes``.
"""

import enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel


class Role(str, enum.Enum):
    PRODUCER = "Producer"
    DISTRIBUTOR = "Distributor"
    RETAILER = "Retailer"


class Stage(str, enum.Enum):
    PRODUCTION = "production"
    DISTRIBUTION = "distribution"
    SALES = "sales"

    @property
    def required_role(self) -> Role:
        return STAGE_ROLES[self]

    @property
    def predecessor(self) -> Optional["Stage"]:
        index = STAGE_ORDER.index(self)
        return STAGE_ORDER[index - 1] if index else None

    @property
    def event_name(self) -> str:
        return STAGE_EVENTS[self]

    def and_later(self) -> Tuple["Stage", ...]:
        """This stage followed by every stage after it in the custody chain."""
        return STAGE_ORDER[STAGE_ORDER.index(self):]


STAGE_ORDER: Tuple[Stage, ...] = (Stage.PRODUCTION, Stage.DISTRIBUTION, Stage.SALES)

STAGE_ROLES: Dict[Stage, Role] = {
    Stage.PRODUCTION: Role.PRODUCER,
    Stage.DISTRIBUTION: Role.DISTRIBUTOR,
    Stage.SALES: Role.RETAILER,
}

STAGE_EVENTS: Dict[Stage, str] = {
    Stage.PRODUCTION: "ProductionRecorded",
    Stage.DISTRIBUTION: "DistributionRecorded",
    Stage.SALES: "SalesRecorded",
}


class UniquenessPolicy(str, enum.Enum):
    """How the key space decides whether a trace number is free for a stage.

    strict:     free only if the target stage and every later stage are empty
                (for production: unused across all three tables).
    per_stage:  free if the target stage table alone has no entry.
    """

    STRICT = "strict"
    PER_STAGE = "per_stage"


class SummaryPolicy(str, enum.Enum):
    DERIVED = "derived"
    CURATED = "curated"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

class LedgerRecord(BaseModel):
    class Config:
        from_attributes = True
        frozen = True


class PrincipalProfile(LedgerRecord):
    principal_id: str
    display_name: str
    organization: str
    role: Role
    registered_by: str
    registered_at: int


class ProductionRecord(LedgerRecord):
    trace_number: str
    food_name: str
    origin_address: str
    quality: int
    producer: str
    recorded_at: int


class DistributionRecord(LedgerRecord):
    trace_number: str
    food_name: str
    handling_address: str
    distributor: str
    recorded_at: int


class SalesRecord(LedgerRecord):
    trace_number: str
    food_name: str
    sale_address: str
    retailer: str
    recorded_at: int


class TraceSummary(LedgerRecord):
    trace_number: str
    food_name: str
    origin_address: str
    produced_at: str
    producer_label: str
    quality: str


# Outbox delivery state of a ledger event.
EVENT_PENDING = "pending"
EVENT_DELIVERED = "delivered"


class LedgerEvent(LedgerRecord):
    sequence: int
    event: str
    stage: Stage
    trace_number: str
    principal_id: str
    recorded_at: int
    status: str = EVENT_PENDING


class TraceChain(LedgerRecord):
    """Everything the ledger holds for one trace number."""

    trace_number: str
    current_stage: Optional[Stage] = None
    production: Optional[ProductionRecord] = None
    distribution: Optional[DistributionRecord] = None
    sales: Optional[SalesRecord] = None
    summary: Optional[TraceSummary] = None


STAGE_RECORD_TYPES = {
    Stage.PRODUCTION: ProductionRecord,
    Stage.DISTRIBUTION: DistributionRecord,
    Stage.SALES: SalesRecord,
}
