"""
Records Endpoints
Lead records collected by field agents
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from leadgen.api.v1.dependencies import get_access_gate, get_access_scope
from leadgen.domain.models.record import Record, RecordCreate
from leadgen.services.tenant_access_gate import TenantAccessGate
from leadgen.utils.tenant_filter import AccessScope

router = APIRouter(prefix="/records", tags=["records"])


@router.get("", response_model=List[Record])
async def list_records(
    agent_id: Optional[str] = Query(None, description="Only records collected by this agent"),
    scope: AccessScope = Depends(get_access_scope),
    gate: TenantAccessGate = Depends(get_access_gate),
):
    """
    List records, newest first.

    Scoped requests see records of the tenant's agents only.
    """
    return gate.list_records(scope, agent_id=agent_id)


@router.post("", response_model=Record)
async def create_record(
    payload: RecordCreate,
    gate: TenantAccessGate = Depends(get_access_gate),
):
    """
    Submit a record.

    Only the agent reference is checked; no tenant header is needed.
    """
    return gate.create_record(payload)
