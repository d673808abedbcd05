"""
Agents Endpoints
List, create, update and delete field agents under public or tenant scope
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from leadgen.api.v1.dependencies import get_access_gate, get_access_scope
from leadgen.domain.models.agent import Agent, AgentCreate, AgentUpdate
from leadgen.services.tenant_access_gate import TenantAccessGate
from leadgen.utils.tenant_filter import AccessScope

router = APIRouter(prefix="/agents", tags=["agents"])


@router.get("", response_model=List[Agent])
async def list_agents(
    search: Optional[str] = Query(None, description="Case-insensitive match on name or phone"),
    scope: AccessScope = Depends(get_access_scope),
    gate: TenantAccessGate = Depends(get_access_gate),
):
    """
    List agents.

    - `?public=true`: every agent (used by the field login flow)
    - otherwise: agents of the tenant in the identity header or `tenant_id`
      query parameter; empty when neither is present
    """
    return gate.list_agents(scope, search=search)


@router.post("", response_model=Agent)
async def create_agent(
    payload: AgentCreate,
    scope: AccessScope = Depends(get_access_scope),
    gate: TenantAccessGate = Depends(get_access_gate),
):
    """Create an agent; the phone is stored in canonical form."""
    return gate.create_agent(payload, scope)


@router.put("/{agent_id}", response_model=Agent)
async def update_agent(
    agent_id: str,
    payload: AgentUpdate,
    scope: AccessScope = Depends(get_access_scope),
    gate: TenantAccessGate = Depends(get_access_gate),
):
    return gate.update_agent(agent_id, payload, scope)


@router.delete("/{agent_id}")
async def delete_agent(
    agent_id: str,
    scope: AccessScope = Depends(get_access_scope),
    gate: TenantAccessGate = Depends(get_access_gate),
):
    gate.delete_agent(agent_id, scope)
    return {"success": True}
