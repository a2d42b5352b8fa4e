"""TraceLedger, the single entry point for ledger reads and writes.

Write path for a stage record:

    registry role check -> key space / order chain gates -> insert
      -> summary projection -> outbox event -> commit -> sink delivery
      -> outbox event marked delivered

Everything up to and including the commit runs under one process-wide lock
and one store transaction, so no two writes ever interleave their
check-then-insert steps. Reads skip the write lock; each store keeps an open
transaction's rows out of their sight until it commits.

An event whose delivery failed stays pending in the outbox until
``redeliver_pending`` hands it to the sink again, so every event reaches the
sink at least once.
"""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterable, List, Optional, Union

from app.core.config import settings
from app.core.domain import (
    EVENT_DELIVERED,
    DistributionRecord,
    LedgerEvent,
    PrincipalProfile,
    ProductionRecord,
    Role,
    SalesRecord,
    Stage,
    SummaryPolicy,
    TraceChain,
    TraceSummary,
    UniquenessPolicy,
)
from app.core.errors import InvalidInput, LedgerError, NotFound
from app.observability import LEDGER_REJECTIONS, STAGE_WRITES
from app.services.ledger_store import LedgerStore, StageRecord
from app.services.notifications import NotificationSink, deliver, notification_sink
from app.services.order_chain import OrderChain
from app.services.principal_registry import PrincipalRegistry
from app.services.trace_keys import TraceKeySpace
from app.services.trace_summary import TraceSummaryProjector

logger = logging.getLogger(__name__)

# Shared by every TraceLedger in the process; one write completes before the next begins.
_write_lock = threading.Lock()


def ledger_clock() -> int:
    """Current ledger time in whole seconds since the epoch."""
    return int(time.time())


class TraceLedger:
    def __init__(
        self,
        store: LedgerStore,
        *,
        administrators: Iterable[str] = (),
        uniqueness_policy: UniquenessPolicy = UniquenessPolicy.STRICT,
        summary_policy: SummaryPolicy = SummaryPolicy.DERIVED,
        sink: Optional[NotificationSink] = None,
        clock: Callable[[], int] = ledger_clock,
        write_lock: Optional[threading.Lock] = None,
    ):
        self.store = store
        self.sink = sink if sink is not None else notification_sink
        self.registry = PrincipalRegistry(store, administrators, clock)
        self.key_space = TraceKeySpace(store, uniqueness_policy)
        self.chain = OrderChain(store, self.registry, self.key_space, clock)
        self.projector = TraceSummaryProjector(store, self.registry, summary_policy)
        self._lock = write_lock if write_lock is not None else _write_lock

    @classmethod
    def from_settings(cls, store: LedgerStore, sink: Optional[NotificationSink] = None) -> "TraceLedger":
        return cls(
            store,
            administrators=settings.ADMIN_PRINCIPALS,
            uniqueness_policy=settings.UNIQUENESS_POLICY,
            summary_policy=settings.SUMMARY_POLICY,
            sink=sink,
        )

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    def register_principal(
        self,
        caller: str,
        principal_id: str,
        display_name: str,
        organization: str,
        role: Union[Role, str],
    ) -> PrincipalProfile:
        with self._write("register_principal"):
            return self.registry.register(caller, principal_id, display_name, organization, role)

    def create_production_record(
        self,
        caller: str,
        trace_number: str,
        food_name: str,
        origin_address: str,
        quality: Any,
    ) -> ProductionRecord:
        def write():
            record, producer = self.chain.create_production(
                caller, trace_number, food_name, origin_address, quality,
            )
            self.projector.project(record, producer)
            return record

        return self._write_stage(Stage.PRODUCTION, caller, write)

    def create_distribution_record(
        self,
        caller: str,
        trace_number: str,
        handling_address: str,
        food_name: Optional[str] = None,
    ) -> DistributionRecord:
        return self._write_stage(
            Stage.DISTRIBUTION,
            caller,
            lambda: self.chain.create_distribution(caller, trace_number, handling_address, food_name),
        )

    def create_sales_record(
        self,
        caller: str,
        trace_number: str,
        sale_address: str,
        food_name: Optional[str] = None,
    ) -> SalesRecord:
        return self._write_stage(
            Stage.SALES,
            caller,
            lambda: self.chain.create_sales(caller, trace_number, sale_address, food_name),
        )

    def add_trace_summary(
        self,
        caller: str,
        trace_number: str,
        name: str,
        address: str,
        produced_at: str,
        origin: str,
        quality: str,
    ) -> TraceSummary:
        with self._write("add_trace_summary"):
            summary = self.projector.add_curated(
                caller, trace_number, name, address, produced_at, origin, quality,
            )
        logger.info("Curated trace summary %s added by %s", trace_number, caller)
        return summary

    def redeliver_pending(self, caller: str) -> List[LedgerEvent]:
        """Re-send outbox events the sink has not accepted, oldest first.

        Stops at the first failure so a later event never overtakes an
        earlier one. Returns the events delivered by this call.
        """
        with self._write("redeliver_events"):
            self.registry.require_admin(caller)
            pending = self.store.pending_events()

        delivered = []
        for event in pending:
            if not deliver(self.sink, event):
                break
            self._mark_delivered(event)
            delivered.append(event.model_copy(update={"status": EVENT_DELIVERED}))
        logger.info(
            "Redelivered %d of %d pending ledger events", len(delivered), len(pending),
            extra={"principal_id": caller},
        )
        return delivered

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    def get_principal(self, principal_id: str) -> PrincipalProfile:
        return self.registry.lookup(principal_id)

    def list_principals(self, role: Optional[Union[Role, str]] = None) -> List[PrincipalProfile]:
        return self.registry.list(role)

    def get_record(self, stage: Union[Stage, str], trace_number: str) -> StageRecord:
        try:
            stage = Stage(stage)
        except ValueError:
            raise InvalidInput(f"Unknown stage {stage!r}") from None
        return self.chain.get(stage, trace_number)

    def get_production_record(self, trace_number: str) -> ProductionRecord:
        return self.chain.get(Stage.PRODUCTION, trace_number)

    def get_distribution_record(self, trace_number: str) -> DistributionRecord:
        return self.chain.get(Stage.DISTRIBUTION, trace_number)

    def get_sales_record(self, trace_number: str) -> SalesRecord:
        return self.chain.get(Stage.SALES, trace_number)

    def get_trace_summary(self, trace_number: str) -> TraceSummary:
        return self.projector.query(trace_number)

    def get_trace(self, trace_number: str) -> TraceChain:
        records = {stage: self.store.get_record(stage, trace_number) for stage in Stage}
        summary = self.store.get_summary(trace_number)
        present = [stage for stage, record in records.items() if record is not None]
        if not present and summary is None:
            raise NotFound(f"Nothing recorded for trace number {trace_number}")
        return TraceChain(
            trace_number=trace_number,
            current_stage=present[-1] if present else None,
            production=records[Stage.PRODUCTION],
            distribution=records[Stage.DISTRIBUTION],
            sales=records[Stage.SALES],
            summary=summary,
        )

    def list_events(self, trace_number: str) -> List[LedgerEvent]:
        return self.store.list_events(trace_number)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    @contextmanager
    def _write(self, operation: str):
        with self._lock:
            try:
                with self.store.transaction():
                    yield
            except LedgerError as err:
                LEDGER_REJECTIONS.labels(operation=operation, error=err.code).inc()
                logger.info("%s rejected: %s (%s)", operation, err.code, err.detail)
                raise

    def _write_stage(self, stage: Stage, caller: str, write: Callable[[], StageRecord]):
        with self._write(f"create_{stage.value}_record"):
            record = write()
            event = self.store.append_event(
                stage.event_name, stage, record.trace_number, caller, record.recorded_at,
            )

        STAGE_WRITES.labels(stage=stage.value).inc()
        logger.info(
            "%s record %s written by %s",
            stage.value.capitalize(),
            record.trace_number,
            caller,
            extra={"sequence": event.sequence},
        )
        if deliver(self.sink, event):
            self._mark_delivered(event)
        return record

    def _mark_delivered(self, event: LedgerEvent) -> None:
        with self._lock:
            with self.store.transaction():
                self.store.mark_delivered(event.sequence)
