"""Stage record endpoints for production, distribution and sales."""

from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from app.api.dependencies import get_caller, get_ledger
from app.core.domain import (
    DistributionRecord,
    ProductionRecord,
    SalesRecord,
    Stage,
)
from app.services.ledger_service import TraceLedger

router = APIRouter(prefix="/records", tags=["records"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class ProductionCreateRequest(BaseModel):
    trace_number: str
    food_name: str
    origin_address: str
    quality: Any  # validated by the ledger: non-negative int or digit string


class DistributionCreateRequest(BaseModel):
    trace_number: str
    handling_address: str
    food_name: str | None = None  # must match the production record if given


class SalesCreateRequest(BaseModel):
    trace_number: str
    sale_address: str
    food_name: str | None = None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/production", response_model=ProductionRecord, status_code=status.HTTP_201_CREATED)
def create_production_record(
    body: ProductionCreateRequest,
    caller: str = Depends(get_caller),
    ledger: TraceLedger = Depends(get_ledger),
):
    return ledger.create_production_record(
        caller,
        body.trace_number,
        body.food_name,
        body.origin_address,
        body.quality,
    )


@router.post("/distribution", response_model=DistributionRecord, status_code=status.HTTP_201_CREATED)
def create_distribution_record(
    body: DistributionCreateRequest,
    caller: str = Depends(get_caller),
    ledger: TraceLedger = Depends(get_ledger),
):
    return ledger.create_distribution_record(
        caller,
        body.trace_number,
        body.handling_address,
        body.food_name,
    )


@router.post("/sales", response_model=SalesRecord, status_code=status.HTTP_201_CREATED)
def create_sales_record(
    body: SalesCreateRequest,
    caller: str = Depends(get_caller),
    ledger: TraceLedger = Depends(get_ledger),
):
    return ledger.create_sales_record(
        caller,
        body.trace_number,
        body.sale_address,
        body.food_name,
    )


@router.get(
    "/{stage}/{trace_number}",
    response_model=ProductionRecord | DistributionRecord | SalesRecord,
)
def get_record(
    stage: Stage,
    trace_number: str,
    ledger: TraceLedger = Depends(get_ledger),
):
    """Fetch the record a trace number holds at one stage."""
    return ledger.get_record(stage, trace_number)
