"""Shared FastAPI dependencies for caller identity, database access and the ledger."""

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from app.database.session import get_db
from app.services.ledger_service import TraceLedger
from app.services.ledger_store import SqlLedgerStore
from app.services.notifications import NotificationSink, notification_sink

# The hosting platform authenticates callers and forwards the principal id.
principal_header = APIKeyHeader(name="X-Principal-ID", auto_error=False)


def get_caller(
    x_principal_id: str | None = Depends(principal_header),
) -> str:
    """Return the authenticated principal identifier presented with the request."""
    if not x_principal_id or not x_principal_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing principal identifier",
        )
    return x_principal_id


def get_notification_sink() -> NotificationSink:
    return notification_sink


def get_ledger(
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
) -> TraceLedger:
    return TraceLedger.from_settings(SqlLedgerStore(db), sink=sink)
