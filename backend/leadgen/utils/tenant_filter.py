"""
Tenant Filter Utility
Shared helpers for resolving tenant scope and applying it to Supabase queries
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class AccessMode(str, Enum):
    PUBLIC = "public"
    SCOPED = "scoped"


@dataclass(frozen=True)
class AccessScope:
    """
    Visibility for one request.

    PUBLIC sees whole collections. SCOPED sees only rows owned by tenant_id;
    a SCOPED scope without a tenant_id sees nothing.
    """
    mode: AccessMode
    tenant_id: Optional[str] = None

    @property
    def is_public(self) -> bool:
        return self.mode == AccessMode.PUBLIC

    @property
    def is_resolved(self) -> bool:
        """True when the scope can see anything at all"""
        return self.is_public or bool(self.tenant_id)

    @classmethod
    def public(cls) -> "AccessScope":
        return cls(AccessMode.PUBLIC)

    @classmethod
    def scoped(cls, tenant_id: Optional[str]) -> "AccessScope":
        return cls(AccessMode.SCOPED, tenant_id or None)


def resolve_scope(
    public: bool,
    header_tenant_id: Optional[str],
    query_tenant_id: Optional[str] = None,
) -> AccessScope:
    """
    Decide the access scope for a request.

    The public flag wins over any tenant id. Otherwise the identity header
    is used, falling back to the tenant_id query parameter.

    Usage:
        scope = resolve_scope(public, request.state.tenant_id, tenant_id)
    """
    if public:
        return AccessScope.public()
    tenant_id = (header_tenant_id or "").strip() or (query_tenant_id or "").strip() or None
    return AccessScope.scoped(tenant_id)


def apply_tenant_filter(query: Any, tenant_id: str, column: str = "tenant_id") -> Any:
    """
    Apply tenant filtering to a Supabase query.

    Args:
        query: Supabase query builder object (from supabase.table(...).select(...))
        tenant_id: Tenant that must own the rows
        column: Name of the tenant column (default: "tenant_id")

    Raises:
        ValueError: If tenant_id is empty. Callers must short-circuit an
            unresolved scope instead of running an unfiltered query.
    """
    if not tenant_id:
        raise ValueError("apply_tenant_filter requires a tenant_id")
    return query.eq(column, tenant_id)


def verify_tenant_access(
    supabase: Any,
    table: str,
    record_id: str,
    tenant_id: Optional[str],
    tenant_column: str = "tenant_id"
) -> bool:
    """
    Verify that a record belongs to the specified tenant.

    Returns:
        True if record exists and belongs to tenant, False otherwise
        (including when tenant_id is missing)

    Usage:
        if not verify_tenant_access(supabase, "officers", agent_id, scope.tenant_id, "dealer_id"):
            raise ApiError.not_found(...)
    """
    if not tenant_id:
        return False

    response = (
        supabase.table(table)
        .select("id")
        .eq("id", record_id)
        .eq(tenant_column, tenant_id)
        .execute()
    )
    return bool(response.data)
