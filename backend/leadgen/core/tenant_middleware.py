"""
Multi-Tenant Middleware
Extracts the resolved tenant id from the identity header
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Optional

from leadgen.core.config import get_settings


class TenantMiddleware(BaseHTTPMiddleware):
    """
    Middleware to extract tenant_id from the identity header

    Usage:
    1. Add to main.py: app.add_middleware(TenantMiddleware)
    2. Access tenant via request.state.tenant_id in endpoints
    """

    def __init__(self, app, header_name: Optional[str] = None):
        super().__init__(app)
        self.header_name = header_name or get_settings().tenant_header

    async def dispatch(self, request: Request, call_next):
        # Missing header is allowed; the access gate decides what that means
        tenant_id = (request.headers.get(self.header_name) or "").strip()
        request.state.tenant_id = tenant_id or None
        return await call_next(request)


def get_current_tenant(request: Request) -> Optional[str]:
    """
    Dependency to get current tenant_id from request

    Usage in endpoints:
    @router.get("/agents")
    async def list_agents(
        header_tenant_id: Optional[str] = Depends(get_current_tenant)
    ):
        ...
    """
    if not hasattr(request.state, "tenant_id"):
        return None
    return request.state.tenant_id
