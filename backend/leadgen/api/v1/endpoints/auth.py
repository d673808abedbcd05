"""
Authentication Endpoints
Dealer (tenant) login by phone number or email, no password
"""
import logging

from fastapi import APIRouter, Depends

from leadgen.api.v1.dependencies import get_access_gate
from leadgen.domain.models.tenant import Tenant, TenantLoginRequest
from leadgen.services.tenant_access_gate import TenantAccessGate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/tenant-login", response_model=Tenant)
async def tenant_login(
    request: TenantLoginRequest,
    gate: TenantAccessGate = Depends(get_access_gate),
):
    """
    Resolve a dealer account.

    Accepts any supported phone shape (0714..., 714..., 255714..., +255714...)
    or an email address. Returns 404 TENANT_NOT_FOUND when nothing matches.
    """
    tenant = gate.find_tenant(request.identifier)
    logger.info(f"Dealer login: {tenant.id}")
    return tenant
