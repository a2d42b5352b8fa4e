"""Principal registration and profile lookup."""

from typing import List

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from app.api.dependencies import get_caller, get_ledger
from app.core.domain import PrincipalProfile
from app.services.ledger_service import TraceLedger

router = APIRouter(prefix="/principals", tags=["principals"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class PrincipalRegisterRequest(BaseModel):
    principal_id: str
    display_name: str
    organization: str
    role: str  # Producer, Distributor, Retailer


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("", response_model=PrincipalProfile, status_code=status.HTTP_201_CREATED)
def register_principal(
    body: PrincipalRegisterRequest,
    caller: str = Depends(get_caller),
    ledger: TraceLedger = Depends(get_ledger),
):
    """Register a principal with a fixed role (administrators only)."""
    return ledger.register_principal(
        caller,
        body.principal_id,
        body.display_name,
        body.organization,
        body.role,
    )


@router.get("", response_model=List[PrincipalProfile])
def list_principals(
    role: str | None = Query(None, description="Producer, Distributor or Retailer"),
    ledger: TraceLedger = Depends(get_ledger),
):
    return ledger.list_principals(role)


@router.get("/{principal_id}", response_model=PrincipalProfile)
def get_principal(
    principal_id: str,
    ledger: TraceLedger = Depends(get_ledger),
):
    return ledger.get_principal(principal_id)
