"""Notification sinks for stage-completion events.

Delivery happens after the write has committed and is fire-and-forget. A
sink that raises is logged and the write stays committed. The event stays
pending in the ledger_events outbox until TraceLedger.redeliver_pending
hands it over again.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from app.core.domain import LedgerEvent

logger = logging.getLogger(__name__)


class NotificationSink(ABC):
    @abstractmethod
    def notify(self, event: LedgerEvent) -> None:
        ...


class LoggingNotificationSink(NotificationSink):
    def notify(self, event: LedgerEvent) -> None:
        logger.info(
            "%s(%s)",
            event.event,
            event.trace_number,
            extra={"sequence": event.sequence, "principal_id": event.principal_id},
        )


class CollectingNotificationSink(NotificationSink):
    """Keeps delivered events in memory, in delivery order."""

    def __init__(self):
        self.events: List[LedgerEvent] = []

    def notify(self, event: LedgerEvent) -> None:
        self.events.append(event)


def deliver(sink: NotificationSink, event: LedgerEvent) -> bool:
    try:
        sink.notify(event)
    except Exception:
        logger.exception("Notification sink failed for %s(%s)", event.event, event.trace_number)
        return False
    return True


notification_sink = LoggingNotificationSink()
