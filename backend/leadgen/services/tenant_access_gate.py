"""
Tenant Access Gate
Server-side visibility rules for the agents and records collections.

Public scope sees everything (the unauthenticated field-agent flow).
Scoped scope sees only rows owned by one tenant, transitively for records.
A scoped request whose tenant cannot be resolved sees nothing: it gets an
empty list, never an error and never the public collection.

Record creation only checks that the agent exists. It does not check the
caller's tenant; agents are trusted to submit for themselves.
"""
import logging
from typing import List, Optional

from supabase import Client

from leadgen.core.exceptions import ApiError
from leadgen.domain.models.agent import Agent, AgentCreate, AgentUpdate
from leadgen.domain.models.record import Record, RecordCreate
from leadgen.domain.models.tenant import Tenant
from leadgen.domain.services.phone_normalizer import (
    DEFAULT_COUNTRY_CODE,
    DEFAULT_TRUNK_PREFIX,
    looks_like_phone,
    normalize,
    normalize_email,
)
from leadgen.utils.tenant_filter import AccessScope, apply_tenant_filter, verify_tenant_access

logger = logging.getLogger(__name__)

TENANTS_TABLE = "dealers"
AGENTS_TABLE = "officers"
RECORDS_TABLE = "leads"

AGENT_TENANT_COLUMN = "dealer_id"
RECORD_AGENT_COLUMN = "officer_id"


class TenantAccessGate:
    """
    Applies public/scoped visibility to agent and record queries.

    Usage:
        gate = TenantAccessGate(supabase)
        records = gate.list_records(AccessScope.scoped(tenant_id))
    """

    def __init__(
        self,
        supabase: Client,
        country_code: str = DEFAULT_COUNTRY_CODE,
        trunk_prefix: str = DEFAULT_TRUNK_PREFIX,
    ):
        self.supabase = supabase
        self.country_code = country_code
        self.trunk_prefix = trunk_prefix

    def _normalize_phone(self, phone: str) -> str:
        return normalize(phone, self.country_code, self.trunk_prefix)

    # =========================================================================
    # Agents
    # =========================================================================

    def list_agents(self, scope: AccessScope, search: Optional[str] = None) -> List[Agent]:
        """
        List agents visible to the scope.

        Args:
            scope: Public or scoped access
            search: Optional case-insensitive match on name or phone
        """
        if not scope.is_resolved:
            logger.info("Scoped agent list without tenant id - returning empty result")
            return []

        try:
            query = self.supabase.table(AGENTS_TABLE).select("*")
            if not scope.is_public:
                query = apply_tenant_filter(query, scope.tenant_id, AGENT_TENANT_COLUMN)
            response = query.order("name").execute()
        except Exception as e:
            logger.error(f"Failed to fetch agents: {e}")
            raise ApiError.internal(
                "Failed to fetch agents",
                "Unable to load agent data from the database. Please try again.",
                "AGENTS_FETCH_ERROR",
            ) from e

        agents = [Agent.model_validate(row) for row in response.data or []]

        if search:
            needle = search.lower().strip()
            agents = [
                a for a in agents
                if needle in a.name.lower() or needle in a.phone.lower()
            ]

        return agents

    def agent_ids_for_tenant(self, tenant_id: str) -> List[str]:
        """Ids of all agents owned by a tenant"""
        response = apply_tenant_filter(
            self.supabase.table(AGENTS_TABLE).select("id"),
            tenant_id,
            AGENT_TENANT_COLUMN,
        ).execute()
        return [row["id"] for row in response.data or []]

    def create_agent(self, payload: AgentCreate, scope: AccessScope) -> Agent:
        """
        Create an agent with a canonical phone.

        Scoped callers create agents for their own tenant only. Public
        callers must name the tenant in the payload.
        """
        if scope.is_public:
            tenant_id = payload.tenant_id
            if not tenant_id:
                raise ApiError.bad_request(
                    "Missing tenant",
                    "tenant_id is required to create an agent.",
                    "MISSING_TENANT",
                )
        elif scope.tenant_id:
            if payload.tenant_id and payload.tenant_id != scope.tenant_id:
                raise ApiError.forbidden(
                    "Tenant mismatch",
                    "You can only create agents for your own account.",
                    "TENANT_MISMATCH",
                )
            tenant_id = scope.tenant_id
        else:
            raise ApiError.forbidden(
                "Tenant required",
                "Sign in as a dealer to manage agents.",
                "TENANT_REQUIRED",
            )

        phone = self._normalize_phone(payload.phone)

        try:
            tenant_rows = self.supabase.table(TENANTS_TABLE).select("id").eq("id", tenant_id).execute()
            if not tenant_rows.data:
                raise ApiError.bad_request(
                    "Invalid tenant",
                    "Dealer not found",
                    "INVALID_TENANT",
                )
            self._ensure_phone_available(phone)

            response = self.supabase.table(AGENTS_TABLE).insert({
                "name": payload.name.strip(),
                "phone": phone,
                AGENT_TENANT_COLUMN: tenant_id,
            }).execute()
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Failed to create agent: {e}")
            raise ApiError.internal(
                "Failed to create agent",
                "Unable to save agent data to the database. Please check your information and try again.",
                "AGENT_CREATE_ERROR",
            ) from e

        if not response.data:
            raise ApiError.internal(
                "Failed to create agent",
                "The database did not return the created agent.",
                "AGENT_CREATE_ERROR",
            )

        agent = Agent.model_validate(response.data[0])
        logger.info(f"Created agent {agent.id} for tenant {tenant_id}")
        return agent

    def update_agent(self, agent_id: str, payload: AgentUpdate, scope: AccessScope) -> Agent:
        """Update name and/or phone. The owning tenant never changes."""
        self._ensure_agent_visible(agent_id, scope)

        changes = {}
        if payload.name is not None:
            changes["name"] = payload.name.strip()
        if payload.phone is not None:
            changes["phone"] = self._normalize_phone(payload.phone)

        if not changes:
            raise ApiError.bad_request(
                "Nothing to update",
                "Provide a name or phone to update.",
                "EMPTY_UPDATE",
            )

        try:
            if "phone" in changes:
                self._ensure_phone_available(changes["phone"], exclude_agent_id=agent_id)
            response = (
                self.supabase.table(AGENTS_TABLE)
                .update(changes)
                .eq("id", agent_id)
                .execute()
            )
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Failed to update agent {agent_id}: {e}")
            raise ApiError.internal(
                "Failed to update agent",
                "Unable to update agent data. Please try again.",
                "AGENT_UPDATE_ERROR",
            ) from e

        if not response.data:
            raise ApiError.not_found("Agent not found", "Agent not found", "AGENT_NOT_FOUND")

        return Agent.model_validate(response.data[0])

    def delete_agent(self, agent_id: str, scope: AccessScope) -> None:
        self._ensure_agent_visible(agent_id, scope)

        try:
            self.supabase.table(AGENTS_TABLE).delete().eq("id", agent_id).execute()
        except Exception as e:
            logger.error(f"Failed to delete agent {agent_id}: {e}")
            raise ApiError.internal(
                "Failed to delete agent",
                "Unable to delete the agent. Please try again.",
                "AGENT_DELETE_ERROR",
            ) from e

        logger.info(f"Deleted agent {agent_id}")

    def _ensure_agent_visible(self, agent_id: str, scope: AccessScope) -> None:
        """404 unless the scope can see the agent (unresolved scopes see none)"""
        try:
            if scope.is_public:
                visible = bool(
                    self.supabase.table(AGENTS_TABLE).select("id").eq("id", agent_id).execute().data
                )
            else:
                visible = verify_tenant_access(
                    self.supabase, AGENTS_TABLE, agent_id, scope.tenant_id, AGENT_TENANT_COLUMN
                )
        except Exception as e:
            logger.error(f"Failed to look up agent {agent_id}: {e}")
            raise ApiError.internal(
                "Failed to fetch agents",
                "Unable to load agent data from the database. Please try again.",
                "AGENTS_FETCH_ERROR",
            ) from e

        if not visible:
            raise ApiError.not_found("Agent not found", "Agent not found", "AGENT_NOT_FOUND")

    def _ensure_phone_available(self, phone: str, exclude_agent_id: Optional[str] = None) -> None:
        rows = self.supabase.table(AGENTS_TABLE).select("id").eq("phone", phone).execute().data or []
        if any(row["id"] != exclude_agent_id for row in rows):
            raise ApiError.conflict(
                "Phone already registered",
                f"An agent with phone {phone} already exists.",
                "AGENT_PHONE_CONFLICT",
            )

    # =========================================================================
    # Records
    # =========================================================================

    def list_records(self, scope: AccessScope, agent_id: Optional[str] = None) -> List[Record]:
        """
        List records visible to the scope, newest first.

        Scoped filtering is two-hop: tenant -> agent ids -> records.
        """
        if not scope.is_resolved:
            logger.info("Scoped record list without tenant id - returning empty result")
            return []

        try:
            query = self.supabase.table(RECORDS_TABLE).select("*")

            if not scope.is_public:
                agent_ids = self.agent_ids_for_tenant(scope.tenant_id)
                if not agent_ids:
                    return []
                query = query.in_(RECORD_AGENT_COLUMN, agent_ids)

            if agent_id:
                query = query.eq(RECORD_AGENT_COLUMN, agent_id)

            response = query.order("created_at", desc=True).execute()
        except Exception as e:
            logger.error(f"Failed to fetch records: {e}")
            raise ApiError.internal(
                "Failed to fetch leads",
                "Unable to load lead data from the database. Please try again.",
                "RECORDS_FETCH_ERROR",
            ) from e

        return [Record.model_validate(row) for row in response.data or []]

    def create_record(self, payload: RecordCreate) -> Record:
        """Create a record for an existing agent"""
        try:
            agent_rows = (
                self.supabase.table(AGENTS_TABLE)
                .select(AGENT_TENANT_COLUMN)
                .eq("id", payload.agent_id)
                .execute()
            )
            if not agent_rows.data:
                raise ApiError.bad_request("Invalid agent", "Agent not found", "INVALID_AGENT")

            response = self.supabase.table(RECORDS_TABLE).insert(payload.to_row()).execute()
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Failed to create record: {e}")
            raise ApiError.internal(
                "Failed to create lead",
                "Unable to save lead data to the database. Please check your information and try again.",
                "RECORD_CREATE_ERROR",
            ) from e

        if not response.data:
            raise ApiError.internal(
                "Failed to create lead",
                "The database did not return the created lead.",
                "RECORD_CREATE_ERROR",
            )

        record = Record.model_validate(response.data[0])
        logger.info(f"Created record {record.id} for agent {record.agent_id}")
        return record

    # =========================================================================
    # Tenants
    # =========================================================================

    def find_tenant(self, identifier: str) -> Tenant:
        """
        Resolve a tenant by phone number or email for login.

        Raises:
            ApiError: 404 TENANT_NOT_FOUND when nothing matches
        """
        try:
            query = self.supabase.table(TENANTS_TABLE).select("*")
            if looks_like_phone(identifier):
                query = query.eq("phone", self._normalize_phone(identifier))
            else:
                query = query.eq("email", normalize_email(identifier))
            response = query.execute()
        except Exception as e:
            logger.error(f"Failed to look up tenant: {e}")
            raise ApiError.internal(
                "Login failed",
                "Unable to verify your account right now. Please try again.",
                "TENANT_LOOKUP_ERROR",
            ) from e

        if not response.data:
            raise ApiError.not_found(
                "Dealer not found",
                "No dealer account matches that phone number or email.",
                "TENANT_NOT_FOUND",
            )

        return Tenant.model_validate(response.data[0])
