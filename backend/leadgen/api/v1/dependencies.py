"""
API Dependencies
Shared dependencies for Supabase access and tenant scope resolution
"""
import os
from typing import Optional
from fastapi import Depends, Query
from supabase import create_client, Client
from dotenv import load_dotenv

from leadgen.core.config import get_settings
from leadgen.core.tenant_middleware import get_current_tenant
from leadgen.services.tenant_access_gate import TenantAccessGate
from leadgen.utils.tenant_filter import AccessScope, resolve_scope

load_dotenv()


def get_supabase() -> Client:
    """
    Get Supabase client with validation.

    Raises:
        RuntimeError: If Supabase URL or SERVICE_KEY is not configured
    """
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_KEY")

    if not url:
        raise RuntimeError(
            "SUPABASE_URL is not configured. "
            "Set SUPABASE_URL environment variable."
        )
    if not key:
        raise RuntimeError(
            "SUPABASE_SERVICE_KEY is not configured. "
            "Set SUPABASE_SERVICE_KEY environment variable."
        )

    return create_client(url, key)


def get_access_gate(supabase: Client = Depends(get_supabase)) -> TenantAccessGate:
    """Tenant access gate bound to the request's Supabase client"""
    settings = get_settings()
    return TenantAccessGate(
        supabase,
        country_code=settings.country_code,
        trunk_prefix=settings.trunk_prefix,
    )


def get_access_scope(
    public: bool = Query(False, description="Return the full, unfiltered collection"),
    tenant_id: Optional[str] = Query(None, description="Tenant id used when the identity header is absent"),
    header_tenant_id: Optional[str] = Depends(get_current_tenant),
) -> AccessScope:
    """
    Resolve public/scoped access for the request.

    `public=true` wins; otherwise the identity header, then the tenant_id
    query parameter. An unresolved scoped request sees nothing.
    """
    return resolve_scope(public, header_tenant_id, tenant_id)
