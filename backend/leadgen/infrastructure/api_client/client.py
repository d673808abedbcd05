"""
Lead Collection API Client
Typed calls over the agents, records and auth endpoints, with retry,
error classification and session identity handling.
"""
import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from leadgen.core.config import ConfigManager, get_settings
from leadgen.domain.models.agent import Agent
from leadgen.domain.models.record import Record, RecordCreate
from leadgen.domain.models.request_outcome import ErrorKind
from leadgen.domain.models.tenant import Tenant
from leadgen.domain.services.phone_normalizer import canonicalize, normalize
from leadgen.infrastructure.api_client.errors import (
    AmbiguousPhoneError,
    IdentityNotFoundError,
    RequestError,
)
from leadgen.infrastructure.api_client.executor import RequestExecutor
from leadgen.infrastructure.api_client.retry import (
    InFlightTracker,
    RetryConfig,
    Sleeper,
    execute_with_retry,
)
from leadgen.infrastructure.api_client.session_context import (
    FileSessionStore,
    InMemorySessionStore,
    SessionContext,
)

logger = logging.getLogger(__name__)


class LeadGenClient:
    """
    Async client for the lead collection API.

    Usage:
        async with LeadGenClient("http://localhost:8000/api/v1") as client:
            agent = await client.login_agent("0714 276 444")
            await client.create_record(RecordCreate(agent_id=agent.id, ...))
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[SessionContext] = None,
        retry_config: Optional[RetryConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        tracker: Optional[InFlightTracker] = None,
        sleep: Sleeper = asyncio.sleep,
        config: Optional[ConfigManager] = None,
    ):
        config = config or ConfigManager()
        # Same source the server gate and middleware read
        settings = get_settings()
        if session is None:
            session_file = config.get("client.session_file")
            store = FileSessionStore(Path(session_file)) if session_file else InMemorySessionStore()
            tenant_header = config.get("client.tenant_header") or settings.tenant_header
            session = SessionContext(store, tenant_header=tenant_header)
        self.session = session
        self.retry_config = retry_config or RetryConfig.from_config(config)
        self.country_code = settings.country_code
        self.trunk_prefix = settings.trunk_prefix
        self.tracker = tracker or InFlightTracker(
            threshold=config.get("client.in_flight_warning_threshold", 10)
        )
        self._sleep = sleep
        self.executor = RequestExecutor(
            base_url,
            self.session,
            timeout_s=self.retry_config.attempt_timeout_s,
            http_client=http_client,
        )

    async def __aenter__(self) -> "LeadGenClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.executor.close()

    # =========================================================================
    # Verbs
    # =========================================================================

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        retry_config: Optional[RetryConfig] = None,
    ) -> Any:
        """Send a request through the retry coordinator"""

        async def attempt():
            return await self.executor.send(method, path, params=params, json=json)

        return await execute_with_retry(
            attempt,
            retry_config or self.retry_config,
            resource=self.executor.url_for(path),
            sleep=self._sleep,
            tracker=self.tracker,
        )

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return await self.request("GET", path, params=params, **kwargs)

    async def post(self, path: str, data: Optional[Any] = None, **kwargs) -> Any:
        return await self.request("POST", path, json=data, **kwargs)

    async def put(self, path: str, data: Optional[Any] = None, **kwargs) -> Any:
        return await self.request("PUT", path, json=data, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)

    # =========================================================================
    # Agents
    # =========================================================================

    async def list_agents(self, public: bool = False, search: Optional[str] = None) -> List[Agent]:
        """
        List agents.

        Public lists every agent (field login flow). Scoped lists only the
        signed-in tenant's agents, and nothing when no tenant is signed in.
        """
        params: Dict[str, Any] = {}
        if public:
            params["public"] = "true"
        if search:
            params["search"] = search
        data = await self.get("/agents", params=params or None)
        return [Agent.model_validate(row) for row in data or []]

    async def create_agent(self, name: str, phone: str, tenant_id: Optional[str] = None) -> Agent:
        payload = {"name": name, "phone": phone, "tenant_id": tenant_id or self.session.tenant_id}
        return Agent.model_validate(await self.post("/agents", payload))

    async def update_agent(
        self,
        agent_id: str,
        name: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Agent:
        payload = {k: v for k, v in {"name": name, "phone": phone}.items() if v is not None}
        return Agent.model_validate(await self.put(f"/agents/{agent_id}", payload))

    async def delete_agent(self, agent_id: str) -> bool:
        result = await self.delete(f"/agents/{agent_id}")
        return bool(isinstance(result, dict) and result.get("success"))

    # =========================================================================
    # Records
    # =========================================================================

    async def list_records(self, public: bool = False, agent_id: Optional[str] = None) -> List[Record]:
        params: Dict[str, Any] = {}
        if public:
            params["public"] = "true"
        if agent_id:
            params["agent_id"] = agent_id
        data = await self.get("/records", params=params or None)
        return [Record.model_validate(row) for row in data or []]

    async def create_record(self, record: RecordCreate) -> Record:
        data = await self.post("/records", record.model_dump(mode="json"))
        return Record.model_validate(data)

    # =========================================================================
    # Sessions
    # =========================================================================

    async def login_tenant(self, identifier: str) -> Tenant:
        """
        Resolve a tenant by phone or email and start a tenant session.

        Raises:
            IdentityNotFoundError: No tenant matches (not retried)
            RequestError: Any other failure
        """
        try:
            data = await self.post("/auth/tenant-login", {"identifier": identifier})
        except RequestError as e:
            if e.classification.kind == ErrorKind.NOT_FOUND:
                raise IdentityNotFoundError(identifier, kind="tenant") from e
            raise

        tenant = Tenant.model_validate(data)
        self.session.sign_in_tenant(tenant)
        return tenant

    async def login_agent(self, phone: str, reject_assumed: bool = False) -> Agent:
        """
        Resolve an agent by phone against the public agent list and start an
        agent session.

        Args:
            phone: Phone number in any supported shape
            reject_assumed: Refuse numbers whose country code had to be guessed

        Raises:
            AmbiguousPhoneError: reject_assumed and the number is not a supported shape
            IdentityNotFoundError: No agent has this canonical phone (not retried)
        """
        canonical = canonicalize(phone, self.country_code, self.trunk_prefix)
        if reject_assumed and canonical.is_assumed:
            raise AmbiguousPhoneError(phone, canonical.value)

        agents = await self.list_agents(public=True)
        for agent in agents:
            if normalize(agent.phone, self.country_code, self.trunk_prefix) == canonical.value:
                self.session.sign_in_agent(agent)
                return agent

        logger.info(f"No agent matches {canonical.value}")
        raise IdentityNotFoundError(phone, kind="agent")

    def logout_tenant(self) -> None:
        self.session.sign_out_tenant()

    def logout_agent(self) -> None:
        self.session.sign_out_agent()
