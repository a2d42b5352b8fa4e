"""Stage-gated custody chain: production -> distribution -> sales.

Each transition is one-shot per trace number and guarded, in order, by:
  1. caller role        (Unauthorized)
  2. required fields    (InvalidInput)
  3. key uniqueness     (DuplicateKey)
  4. predecessor stage  (PredecessorMissing)

Food names propagate by value from the predecessor record at write time.
Callers (TraceLedger) are responsible for running these inside a write
transaction so that the checks and the insert form one atomic step.
"""

from typing import Any, Callable, Optional, Tuple

from app.core.domain import (
    DistributionRecord,
    PrincipalProfile,
    ProductionRecord,
    SalesRecord,
    Stage,
)
from app.core.errors import InvalidInput, NotFound, PredecessorMissing
from app.core.validation import parse_quality, require_text
from app.services.ledger_store import LedgerStore, StageRecord
from app.services.principal_registry import PrincipalRegistry
from app.services.trace_keys import TraceKeySpace


class OrderChain:
    def __init__(
        self,
        store: LedgerStore,
        registry: PrincipalRegistry,
        key_space: TraceKeySpace,
        clock: Callable[[], int],
    ):
        self.store = store
        self.registry = registry
        self.key_space = key_space
        self.clock = clock

    def create_production(
        self,
        caller: str,
        trace_number: str,
        food_name: str,
        origin_address: str,
        quality: Any,
    ) -> Tuple[ProductionRecord, PrincipalProfile]:
        """Record the production stage. Returns ``(record, producer_profile)``."""
        producer = self.registry.require_role(caller, Stage.PRODUCTION.required_role)
        require_text(trace_number, "trace_number")
        require_text(food_name, "food_name")
        require_text(origin_address, "origin_address")
        quality = parse_quality(quality)

        self.key_space.claim(trace_number, Stage.PRODUCTION)

        record = ProductionRecord(
            trace_number=trace_number,
            food_name=food_name,
            origin_address=origin_address,
            quality=quality,
            producer=caller,
            recorded_at=self.clock(),
        )
        self.store.put_record(Stage.PRODUCTION, record)
        return record, producer

    def create_distribution(
        self,
        caller: str,
        trace_number: str,
        handling_address: str,
        food_name: Optional[str] = None,
    ) -> DistributionRecord:
        food_name = self._advance(
            caller, Stage.DISTRIBUTION, trace_number,
            ("handling_address", handling_address), food_name,
        )
        record = DistributionRecord(
            trace_number=trace_number,
            food_name=food_name,
            handling_address=handling_address,
            distributor=caller,
            recorded_at=self.clock(),
        )
        self.store.put_record(Stage.DISTRIBUTION, record)
        return record

    def create_sales(
        self,
        caller: str,
        trace_number: str,
        sale_address: str,
        food_name: Optional[str] = None,
    ) -> SalesRecord:
        food_name = self._advance(
            caller, Stage.SALES, trace_number,
            ("sale_address", sale_address), food_name,
        )
        record = SalesRecord(
            trace_number=trace_number,
            food_name=food_name,
            sale_address=sale_address,
            retailer=caller,
            recorded_at=self.clock(),
        )
        self.store.put_record(Stage.SALES, record)
        return record

    def get(self, stage: Stage, trace_number: str) -> StageRecord:
        record = self.store.get_record(stage, trace_number)
        if record is None:
            raise NotFound(f"No {stage.value} record for trace number {trace_number}")
        return record

    def _advance(
        self,
        caller: str,
        stage: Stage,
        trace_number: str,
        address: Tuple[str, Any],
        food_name: Optional[str],
    ) -> str:
        """Run the guards for a non-initial stage; return the inherited food name."""
        self.registry.require_role(caller, stage.required_role)
        require_text(trace_number, "trace_number")
        require_text(address[1], address[0])
        if food_name is not None:
            require_text(food_name, "food_name")

        self.key_space.claim(trace_number, stage)

        predecessor = self.store.get_record(stage.predecessor, trace_number)
        if predecessor is None:
            raise PredecessorMissing(
                f"Trace number {trace_number} has no {stage.predecessor.value} record"
            )
        if food_name is not None and food_name != predecessor.food_name:
            raise InvalidInput(
                f"food_name {food_name!r} does not match {stage.predecessor.value} "
                f"record ({predecessor.food_name!r})"
            )
        return predecessor.food_name
