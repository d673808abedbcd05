"""
Tenant Domain Models
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class Tenant(BaseModel):
    """
    Organizational account owning a set of agents.

    Stored in the `dealers` table. `phone` is the canonical phone
    and is unique across tenants.
    """
    id: str
    name: str = Field(..., description="Display name")
    phone: str = Field(..., description="Canonical phone, e.g. +255714276111")
    email: Optional[str] = None
    company: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")


class TenantLoginRequest(BaseModel):
    """Tenant login by phone number or email"""
    identifier: str = Field(..., min_length=1)
