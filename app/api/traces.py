"""Trace summaries, consolidated trace chains and the event history."""

from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from app.api.dependencies import get_caller, get_ledger
from app.core.domain import LedgerEvent, TraceChain, TraceSummary
from app.services.ledger_service import TraceLedger

router = APIRouter(tags=["traces"])


class TraceSummaryCreateRequest(BaseModel):
    trace_number: str
    name: str
    address: str
    produced_at: str
    origin: str
    quality: str


@router.post("/trace-summaries", response_model=TraceSummary, status_code=status.HTTP_201_CREATED)
def add_trace_summary(
    body: TraceSummaryCreateRequest,
    caller: str = Depends(get_caller),
    ledger: TraceLedger = Depends(get_ledger),
):
    """Enter a curated summary (curated deployments, administrators only)."""
    return ledger.add_trace_summary(
        caller,
        body.trace_number,
        body.name,
        body.address,
        body.produced_at,
        body.origin,
        body.quality,
    )


@router.get("/trace-summaries/{trace_number}", response_model=TraceSummary)
def get_trace_summary(
    trace_number: str,
    ledger: TraceLedger = Depends(get_ledger),
):
    return ledger.get_trace_summary(trace_number)


@router.get("/traces/{trace_number}", response_model=TraceChain)
def get_trace(
    trace_number: str,
    ledger: TraceLedger = Depends(get_ledger),
):
    return ledger.get_trace(trace_number)


@router.get("/traces/{trace_number}/events", response_model=List[LedgerEvent])
def list_trace_events(
    trace_number: str,
    ledger: TraceLedger = Depends(get_ledger),
):
    return ledger.list_events(trace_number)


@router.post("/events/redeliver", response_model=List[LedgerEvent])
def redeliver_pending_events(
    caller: str = Depends(get_caller),
    ledger: TraceLedger = Depends(get_ledger),
):
    """Hand undelivered outbox events to the notification sink again (administrators only)."""
    return ledger.redeliver_pending(caller)
