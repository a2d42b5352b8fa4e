"""Trace number key space. Decides whether a key may be claimed for a stage."""

from typing import List, Tuple

from app.core.domain import Stage, UniquenessPolicy
from app.core.errors import DuplicateKey
from app.services.ledger_store import LedgerStore


class TraceKeySpace:
    def __init__(self, store: LedgerStore, policy: UniquenessPolicy = UniquenessPolicy.STRICT):
        self.store = store
        self.policy = UniquenessPolicy(policy)

    def tables_checked(self, stage: Stage) -> Tuple[Stage, ...]:
        if self.policy is UniquenessPolicy.STRICT:
            return stage.and_later()
        return (stage,)

    def occupied(self, trace_number: str, stage: Stage) -> List[Stage]:
        """Checked stages that already hold a record for ``trace_number``."""
        return [
            checked
            for checked in self.tables_checked(stage)
            if self.store.get_record(checked, trace_number) is not None
        ]

    def is_free(self, trace_number: str, stage: Stage = Stage.PRODUCTION) -> bool:
        return not self.occupied(trace_number, stage)

    def claim(self, trace_number: str, stage: Stage) -> None:
        """Raise DuplicateKey unless ``trace_number`` is free for ``stage``.

        Must run inside the same write transaction as the insert it guards.
        """
        taken = self.occupied(trace_number, stage)
        if taken:
            raise DuplicateKey(f"Trace number {trace_number} already has a {taken[0].value} record")
