"""
Shared test fixtures

FakeSupabase mimics the subset of the Supabase query builder the access
gate uses (select/insert/update/delete, eq, in_, order, execute) over
in-memory tables, so tenant filtering is exercised for real.
"""
import copy
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.action = "select"
        self.columns = "*"
        self.payload: Any = None
        self.filters = []
        self.order_by: Optional[tuple] = None

    def select(self, columns: str = "*"):
        self.action = "select"
        self.columns = columns
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, changes):
        self.action = "update"
        self.payload = changes
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        allowed = list(values)
        self.filters.append(lambda row: row.get(column) in allowed)
        return self

    def order(self, column, desc: bool = False):
        self.order_by = (column, desc)
        return self

    def _project(self, row):
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        return {c.strip(): row.get(c.strip()) for c in self.columns.split(",")}

    def execute(self) -> FakeResponse:
        self.db.executed.append((self.table_name, self.action))
        if self.table_name in self.db.failing_tables:
            raise RuntimeError(f"connection to {self.table_name} lost")

        rows = self.db.tables.setdefault(self.table_name, [])

        if self.action == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for item in items:
                row = dict(item)
                now = datetime.now(timezone.utc).isoformat()
                row.setdefault("id", str(uuid.uuid4()))
                row.setdefault("created_at", now)
                row.setdefault("updated_at", now)
                rows.append(row)
                created.append(copy.deepcopy(row))
            return FakeResponse(created)

        matched = [row for row in rows if all(f(row) for f in self.filters)]

        if self.action == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([copy.deepcopy(row) for row in matched])

        if self.action == "delete":
            self.db.tables[self.table_name] = [row for row in rows if row not in matched]
            return FakeResponse([copy.deepcopy(row) for row in matched])

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda row: row.get(column) or "", reverse=desc)
        return FakeResponse([self._project(row) for row in matched])


class FakeSupabase:
    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables = copy.deepcopy(tables or {})
        self.failing_tables = set()
        self.executed = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


def make_record(record_id: str, agent_id: str, created_at: str, **overrides) -> Dict[str, Any]:
    row = {
        "id": record_id,
        "officer_id": agent_id,
        "area_of_activity": "Kariakoo",
        "ward": "Ilala",
        "gps_latitude": -6.8161,
        "gps_longitude": 39.2803,
        "gps_accuracy": 12.5,
        "lead_name": "Asha Mussa",
        "phone_contact": "+255754123456",
        "residence": "Mbezi",
        "interested_phone_model": "Galaxy A15",
        "next_contact_date": "2026-11-02",
        "created_at": created_at,
        "updated_at": created_at,
    }
    row.update(overrides)
    return row


def seed_tables() -> Dict[str, List[Dict[str, Any]]]:
    """
    Tenant A owns agent a1; tenant B owns agents b1 and b2.
    Records exist for a1 and b2.
    """
    return {
        "dealers": [
            {"id": "tenant-a", "name": "Fredy Dealers", "email": "fredy@example.com",
             "phone": "+255714276111", "company": "Mbezi Ltd"},
            {"id": "tenant-b", "name": "Bahari Phones", "email": "sales@bahari.example.com",
             "phone": "+255714276222", "company": "Bahari Ltd"},
        ],
        "officers": [
            {"id": "a1", "name": "G-Officer", "phone": "+255714276444", "dealer_id": "tenant-a"},
            {"id": "b1", "name": "Halima Said", "phone": "+255714276555", "dealer_id": "tenant-b"},
            {"id": "b2", "name": "Juma Ally", "phone": "+255714276666", "dealer_id": "tenant-b"},
        ],
        "leads": [
            make_record("rec-a1", "a1", "2026-10-01T08:00:00+00:00"),
            make_record("rec-b2", "b2", "2026-10-02T09:30:00+00:00", lead_name="Neema Joseph"),
        ],
    }


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase(seed_tables())


@pytest.fixture
def api_client(fake_supabase):
    """FastAPI TestClient with the fake Supabase injected"""
    from fastapi.testclient import TestClient
    from leadgen.api.v1.dependencies import get_supabase
    from leadgen.main import app

    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_supabase, None)
