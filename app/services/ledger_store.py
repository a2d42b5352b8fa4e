"""Storage for the ledger: a keyed, append-only mapping per table.

Two implementations share one interface so the gating logic never needs to
know where records live:

  - InMemoryLedgerStore: dicts guarded by a re-entrant lock; transactions
    hold the lock, snapshot state on entry and restore it on error.
  - SqlLedgerStore:      SQLAlchemy session; transactions commit on success
    and roll back on error. Primary keys back up the uniqueness gate when
    several processes share a database.

Every ``put_*`` refuses to overwrite an existing key with DuplicateKey.
"""

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.domain import (
    EVENT_DELIVERED,
    EVENT_PENDING,
    STAGE_RECORD_TYPES,
    DistributionRecord,
    LedgerEvent,
    PrincipalProfile,
    ProductionRecord,
    Role,
    SalesRecord,
    Stage,
    TraceSummary,
)
from app.core.errors import AlreadyRegistered, DuplicateKey, NotFound
from app.models.distribution_record import DistributionRow
from app.models.ledger_event import LedgerEventRow
from app.models.principal import PrincipalRow
from app.models.production_record import ProductionRow
from app.models.sales_record import SalesRow
from app.models.trace_summary import TraceSummaryRow

logger = logging.getLogger(__name__)

StageRecord = Union[ProductionRecord, DistributionRecord, SalesRecord]


class LedgerStore(ABC):
    @abstractmethod
    def transaction(self):
        """Context manager making every write inside it atomic."""

    @abstractmethod
    def get_principal(self, principal_id: str) -> Optional[PrincipalProfile]:
        ...

    @abstractmethod
    def list_principals(self, role: Optional[Role] = None) -> List[PrincipalProfile]:
        ...

    @abstractmethod
    def put_principal(self, profile: PrincipalProfile) -> None:
        ...

    @abstractmethod
    def get_record(self, stage: Stage, trace_number: str) -> Optional[StageRecord]:
        ...

    @abstractmethod
    def put_record(self, stage: Stage, record: StageRecord) -> None:
        ...

    @abstractmethod
    def get_summary(self, trace_number: str) -> Optional[TraceSummary]:
        ...

    @abstractmethod
    def put_summary(self, summary: TraceSummary) -> None:
        ...

    @abstractmethod
    def append_event(
        self,
        event: str,
        stage: Stage,
        trace_number: str,
        principal_id: str,
        recorded_at: int,
    ) -> LedgerEvent:
        ...

    @abstractmethod
    def list_events(self, trace_number: str) -> List[LedgerEvent]:
        ...

    @abstractmethod
    def mark_delivered(self, sequence: int) -> None:
        ...

    @abstractmethod
    def pending_events(self) -> List[LedgerEvent]:
        """Outbox events the sink has not accepted yet, oldest first."""


def _check_record_type(stage: Stage, record: StageRecord) -> None:
    expected = STAGE_RECORD_TYPES[stage]
    if not isinstance(record, expected):
        raise TypeError(f"{stage.value} table stores {expected.__name__}, got {type(record).__name__}")


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

class InMemoryLedgerStore(LedgerStore):
    def __init__(self):
        self._lock = threading.RLock()
        self._principals: Dict[str, PrincipalProfile] = {}
        self._tables: Dict[Stage, Dict[str, StageRecord]] = {stage: {} for stage in Stage}
        self._summaries: Dict[str, TraceSummary] = {}
        self._events: List[LedgerEvent] = []

    @contextmanager
    def transaction(self) -> Iterator["InMemoryLedgerStore"]:
        with self._lock:
            snapshot = (
                dict(self._principals),
                {stage: dict(rows) for stage, rows in self._tables.items()},
                dict(self._summaries),
                list(self._events),
            )
            try:
                yield self
            except BaseException:
                self._principals, self._tables, self._summaries, self._events = snapshot
                raise

    # Readers take the lock too, so an open transaction hides its rows until
    # it has either finished or been restored from the snapshot.

    def get_principal(self, principal_id: str) -> Optional[PrincipalProfile]:
        with self._lock:
            return self._principals.get(principal_id)

    def list_principals(self, role: Optional[Role] = None) -> List[PrincipalProfile]:
        with self._lock:
            profiles = list(self._principals.values())
        if role is not None:
            profiles = [p for p in profiles if p.role == role]
        return sorted(profiles, key=lambda p: p.principal_id)

    def put_principal(self, profile: PrincipalProfile) -> None:
        with self._lock:
            if profile.principal_id in self._principals:
                raise AlreadyRegistered(f"Principal {profile.principal_id} already registered")
            self._principals[profile.principal_id] = profile

    def get_record(self, stage: Stage, trace_number: str) -> Optional[StageRecord]:
        with self._lock:
            return self._tables[stage].get(trace_number)

    def put_record(self, stage: Stage, record: StageRecord) -> None:
        _check_record_type(stage, record)
        with self._lock:
            table = self._tables[stage]
            if record.trace_number in table:
                raise DuplicateKey(f"{stage.value} record {record.trace_number} already exists")
            table[record.trace_number] = record

    def get_summary(self, trace_number: str) -> Optional[TraceSummary]:
        with self._lock:
            return self._summaries.get(trace_number)

    def put_summary(self, summary: TraceSummary) -> None:
        with self._lock:
            if summary.trace_number in self._summaries:
                raise DuplicateKey(f"Trace summary {summary.trace_number} already exists")
            self._summaries[summary.trace_number] = summary

    def append_event(self, event, stage, trace_number, principal_id, recorded_at) -> LedgerEvent:
        with self._lock:
            entry = LedgerEvent(
                sequence=len(self._events) + 1,
                event=event,
                stage=stage,
                trace_number=trace_number,
                principal_id=principal_id,
                recorded_at=recorded_at,
            )
            self._events.append(entry)
        return entry

    def list_events(self, trace_number: str) -> List[LedgerEvent]:
        with self._lock:
            events = list(self._events)
        return [e for e in events if e.trace_number == trace_number]

    def mark_delivered(self, sequence: int) -> None:
        with self._lock:
            for index, entry in enumerate(self._events):
                if entry.sequence == sequence:
                    self._events[index] = entry.model_copy(update={"status": EVENT_DELIVERED})
                    return
        raise NotFound(f"No ledger event {sequence}")

    def pending_events(self) -> List[LedgerEvent]:
        with self._lock:
            return [e for e in self._events if e.status == EVENT_PENDING]


# ---------------------------------------------------------------------------
# SQLAlchemy
# ---------------------------------------------------------------------------

STAGE_ROW_MAP = {
    Stage.PRODUCTION: ProductionRow,
    Stage.DISTRIBUTION: DistributionRow,
    Stage.SALES: SalesRow,
}


class SqlLedgerStore(LedgerStore):
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self) -> Iterator["SqlLedgerStore"]:
        try:
            yield self
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateKey("Key already exists") from exc
        except BaseException:
            self.db.rollback()
            raise

    def _insert(self, row, conflict: Exception) -> None:
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError as exc:
            logger.info("Insert into %s rejected by constraint", row.__tablename__)
            raise conflict from exc

    def get_principal(self, principal_id: str) -> Optional[PrincipalProfile]:
        row = self.db.get(PrincipalRow, principal_id)
        return PrincipalProfile.model_validate(row) if row else None

    def list_principals(self, role: Optional[Role] = None) -> List[PrincipalProfile]:
        query = self.db.query(PrincipalRow)
        if role is not None:
            query = query.filter(PrincipalRow.role == role.value)
        rows = query.order_by(PrincipalRow.principal_id).all()
        return [PrincipalProfile.model_validate(row) for row in rows]

    def put_principal(self, profile: PrincipalProfile) -> None:
        if self.db.get(PrincipalRow, profile.principal_id) is not None:
            raise AlreadyRegistered(f"Principal {profile.principal_id} already registered")
        self._insert(
            PrincipalRow(**profile.model_dump(mode="json")),
            AlreadyRegistered(f"Principal {profile.principal_id} already registered"),
        )

    def get_record(self, stage: Stage, trace_number: str) -> Optional[StageRecord]:
        row = self.db.get(STAGE_ROW_MAP[stage], trace_number)
        return STAGE_RECORD_TYPES[stage].model_validate(row) if row else None

    def put_record(self, stage: Stage, record: StageRecord) -> None:
        _check_record_type(stage, record)
        row_cls = STAGE_ROW_MAP[stage]
        conflict = DuplicateKey(f"{stage.value} record {record.trace_number} already exists")
        if self.db.get(row_cls, record.trace_number) is not None:
            raise conflict
        self._insert(row_cls(**record.model_dump(mode="json")), conflict)

    def get_summary(self, trace_number: str) -> Optional[TraceSummary]:
        row = self.db.get(TraceSummaryRow, trace_number)
        return TraceSummary.model_validate(row) if row else None

    def put_summary(self, summary: TraceSummary) -> None:
        conflict = DuplicateKey(f"Trace summary {summary.trace_number} already exists")
        if self.db.get(TraceSummaryRow, summary.trace_number) is not None:
            raise conflict
        self._insert(TraceSummaryRow(**summary.model_dump(mode="json")), conflict)

    def append_event(self, event, stage, trace_number, principal_id, recorded_at) -> LedgerEvent:
        row = LedgerEventRow(
            event=event,
            stage=stage.value,
            trace_number=trace_number,
            principal_id=principal_id,
            recorded_at=recorded_at,
            status=EVENT_PENDING,
        )
        self.db.add(row)
        self.db.flush()
        return LedgerEvent.model_validate(row)

    def list_events(self, trace_number: str) -> List[LedgerEvent]:
        rows = (
            self.db.query(LedgerEventRow)
            .filter(LedgerEventRow.trace_number == trace_number)
            .order_by(LedgerEventRow.sequence)
            .all()
        )
        return [LedgerEvent.model_validate(row) for row in rows]

    def mark_delivered(self, sequence: int) -> None:
        row = self.db.get(LedgerEventRow, sequence)
        if row is None:
            raise NotFound(f"No ledger event {sequence}")
        row.status = EVENT_DELIVERED
        self.db.flush()

    def pending_events(self) -> List[LedgerEvent]:
        rows = (
            self.db.query(LedgerEventRow)
            .filter(LedgerEventRow.status == EVENT_PENDING)
            .order_by(LedgerEventRow.sequence)
            .all()
        )
        return [LedgerEvent.model_validate(row) for row in rows]
