"""
Agent Domain Models
"""
from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from typing import Optional
from datetime import datetime


class Agent(BaseModel):
    """
    Field representative collecting records for exactly one tenant.

    Stored in the `officers` table; the owning tenant lives in `dealer_id`.
    """
    id: str
    name: str
    phone: str = Field(..., description="Canonical phone")
    tenant_id: str = Field(..., validation_alias=AliasChoices("tenant_id", "dealer_id"))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")


class AgentCreate(BaseModel):
    """Create agent request"""
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    tenant_id: Optional[str] = None


class AgentUpdate(BaseModel):
    """
    Update agent request.

    No tenant field: the agent -> tenant link is immutable.
    """
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None, min_length=1)
