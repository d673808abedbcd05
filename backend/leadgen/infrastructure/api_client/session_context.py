"""
Session Context
Holds the resolved tenant and agent identities for the current session.

The two identities are independent: a tenant session authorizes scoped
administrative reads, an agent session authorizes lead collection. Each is
persisted under its own fixed key in a client-local key/value store.
"""
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from leadgen.domain.models.agent import Agent
from leadgen.domain.models.tenant import Tenant

logger = logging.getLogger(__name__)

TENANT_KEY = "tenant"
AGENT_KEY = "agent"


class SessionStore(ABC):
    """Synchronous key/value store for session identities"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...


class InMemorySessionStore(SessionStore):
    """Process-local store, mostly for tests and short-lived scripts"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileSessionStore(SessionStore):
    """
    JSON file store that survives process restarts.

    The whole file is rewritten on every change; the store holds two keys
    at most so this stays cheap.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class SessionContext:
    """
    Zero-or-one tenant identity and zero-or-one agent identity.

    Constructed once and passed to the request executor and the API client.
    Reads are synchronous; a sign-out racing an in-flight request can still
    let that one request go out with the old tenant header.
    """

    def __init__(self, store: Optional[SessionStore] = None, tenant_header: str = "X-Tenant-Id"):
        self.store = store or InMemorySessionStore()
        self.tenant_header = tenant_header

    def _load(self, key: str, model: Any) -> Optional[Any]:
        raw = self.store.get(key)
        if not raw:
            return None
        try:
            return model.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding corrupt '{key}' session entry: {e.error_count()} errors")
            return None

    # ---- Tenant ----

    @property
    def tenant(self) -> Optional[Tenant]:
        return self._load(TENANT_KEY, Tenant)

    @property
    def tenant_id(self) -> Optional[str]:
        tenant = self.tenant
        return tenant.id if tenant else None

    def sign_in_tenant(self, tenant: Tenant) -> None:
        self.store.set(TENANT_KEY, tenant.model_dump_json())
        logger.info(f"Tenant session started: {tenant.id}")

    def sign_out_tenant(self) -> None:
        self.store.remove(TENANT_KEY)

    def is_tenant_authenticated(self) -> bool:
        return self.tenant is not None

    # ---- Agent ----

    @property
    def agent(self) -> Optional[Agent]:
        return self._load(AGENT_KEY, Agent)

    def sign_in_agent(self, agent: Agent) -> None:
        self.store.set(AGENT_KEY, agent.model_dump_json())
        logger.info(f"Agent session started: {agent.id}")

    def sign_out_agent(self) -> None:
        self.store.remove(AGENT_KEY)

    def is_agent_authenticated(self) -> bool:
        return self.agent is not None

    def clear(self) -> None:
        """End both sessions"""
        self.sign_out_tenant()
        self.sign_out_agent()

    def identity_headers(self) -> Dict[str, str]:
        """Headers for an outgoing request; empty when no tenant session exists"""
        tenant_id = self.tenant_id
        if not tenant_id:
            return {}
        return {self.tenant_header: tenant_id}
