"""Trace summary projection.

derived:  the summary is computed inside the production write:
          produced_at = ledger time as decimal text, producer_label = the
          producer's organization, quality = decimal text of the score.
curated:  an administrator enters summaries directly; no link to the
          order chain.

Either way a summary is written once and never changed.
"""

from app.core.domain import PrincipalProfile, ProductionRecord, SummaryPolicy, TraceSummary
from app.core.errors import DuplicateKey, NotFound, UnsupportedOperation
from app.core.validation import require_text
from app.services.ledger_store import LedgerStore
from app.services.principal_registry import PrincipalRegistry


class TraceSummaryProjector:
    def __init__(
        self,
        store: LedgerStore,
        registry: PrincipalRegistry,
        policy: SummaryPolicy = SummaryPolicy.DERIVED,
    ):
        self.store = store
        self.registry = registry
        self.policy = SummaryPolicy(policy)

    @property
    def derives(self) -> bool:
        return self.policy is SummaryPolicy.DERIVED

    def project(self, record: ProductionRecord, producer: PrincipalProfile):
        """Derive and store the summary for a freshly written production record."""
        if not self.derives:
            return None
        summary = TraceSummary(
            trace_number=record.trace_number,
            food_name=record.food_name,
            origin_address=record.origin_address,
            produced_at=str(record.recorded_at),
            producer_label=producer.organization,
            quality=str(record.quality),
        )
        self.store.put_summary(summary)
        return summary

    def add_curated(
        self,
        caller: str,
        trace_number: str,
        name: str,
        address: str,
        produced_at: str,
        origin: str,
        quality: str,
    ) -> TraceSummary:
        if self.derives:
            raise UnsupportedOperation(
                "Trace summaries are derived from production records in this deployment"
            )
        self.registry.require_admin(caller)
        for field, value in (
            ("trace_number", trace_number),
            ("name", name),
            ("address", address),
            ("produced_at", produced_at),
            ("origin", origin),
            ("quality", quality),
        ):
            require_text(value, field)

        if self.store.get_summary(trace_number) is not None:
            raise DuplicateKey(f"Trace summary {trace_number} already exists")

        summary = TraceSummary(
            trace_number=trace_number,
            food_name=name,
            origin_address=address,
            produced_at=produced_at,
            producer_label=origin,
            quality=quality,
        )
        self.store.put_summary(summary)
        return summary

    def query(self, trace_number: str) -> TraceSummary:
        summary = self.store.get_summary(trace_number)
        if summary is None:
            raise NotFound(f"No trace summary for {trace_number}")
        return summary
