"""Shared pytest fixtures and in-memory fakes for the storefront tests."""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

import pytest

from teastore.core.config import PaymentConfig, SupabaseConfig
from teastore.domain.checkout import PaymentSheetParams
from teastore.integrations.kv_store import MemoryKeyValueStore
from teastore.integrations.payment_service import PaymentSheetError, PaymentSheetResult
from teastore.integrations.supabase_data import BackendError, BackendResult


class FakeDataClient:
    """In-memory stand-in for ``SupabaseDataClient`` with per-call failure injection."""

    def __init__(self, tables: dict[str, list[dict]] | None = None):
        self.tables: dict[str, list[dict]] = {name: list(rows) for name, rows in (tables or {}).items()}
        self.fail: set[tuple[str, str]] = set()
        self.calls: list[tuple[str, str]] = []
        self._next_id: dict[str, int] = {}

    def _rows(self, table: str) -> list[dict]:
        return self.tables.setdefault(table, [])

    def _failure(self, method: str, table: str) -> BackendResult | None:
        self.calls.append((method, table))
        if (method, table) in self.fail:
            return BackendResult(error=BackendError(f"{method} on {table} rejected", code="42501", status=403))
        return None

    @staticmethod
    def _matches(row: dict, filters: dict | None) -> bool:
        for column, value in (filters or {}).items():
            # the REST API compares on the textual value
            if isinstance(value, (list, tuple, set)):
                if str(row.get(column)) not in {str(item) for item in value}:
                    return False
            elif str(row.get(column)) != str(value):
                return False
        return True

    async def select(self, table, columns="*", *, filters=None, order=None, limit=None, single=False):
        failed = self._failure("select", table)
        if failed:
            return failed
        rows = [copy.deepcopy(row) for row in self._rows(table) if self._matches(row, filters)]
        if order:
            column, _, direction = order.partition(".")
            rows.sort(key=lambda row: str(row.get(column) or ""), reverse=direction == "desc")
        if columns != "*":
            wanted = [name.strip() for name in columns.split(",")]
            rows = [{name: row.get(name) for name in wanted} for row in rows]
        if limit is not None:
            rows = rows[:limit]
        return BackendResult(data=rows[0] if single and rows else rows)

    async def insert(self, table, rows, *, returning=True, single=False):
        failed = self._failure("insert", table)
        if failed:
            return failed
        if isinstance(rows, dict):
            rows = [rows]
        created = []
        for row in rows:
            record = dict(row)
            if "id" not in record:
                existing_ids = [r["id"] for r in self._rows(table) if isinstance(r.get("id"), int)]
                next_id = self._next_id.get(table, max(existing_ids, default=0) + 1)
                self._next_id[table] = next_id + 1
                record["id"] = next_id
            self._rows(table).append(record)
            created.append(copy.deepcopy(record))
        return BackendResult(data=created if returning else None)

    async def upsert(self, table, rows, *, on_conflict=None):
        failed = self._failure("upsert", table)
        if failed:
            return failed
        if isinstance(rows, dict):
            rows = [rows]
        saved = []
        for row in rows:
            existing = next((r for r in self._rows(table) if r.get("id") == row.get("id")), None)
            if existing is None:
                existing = dict(row)
                self._rows(table).append(existing)
            else:
                existing.update(row)
            saved.append(copy.deepcopy(existing))
        return BackendResult(data=saved)

    async def update(self, table, values, *, filters):
        failed = self._failure("update", table)
        if failed:
            return failed
        updated = []
        for row in self._rows(table):
            if self._matches(row, filters):
                row.update(values)
                updated.append(copy.deepcopy(row))
        return BackendResult(data=updated)

    async def delete(self, table, *, filters):
        failed = self._failure("delete", table)
        if failed:
            return failed
        self.tables[table] = [row for row in self._rows(table) if not self._matches(row, filters)]
        return BackendResult(data=None)


@dataclass
class FakePaymentService:
    """Records payment intent requests; raises ``error`` when set."""

    error: Exception | None = None
    merchant_display_name: str = "Tea App"
    appearance: dict = field(default_factory=lambda: {"colors": {"primary": "#006400"}})
    requests: list[tuple[int, list[dict]]] = field(default_factory=list)

    async def create_payment_intent(self, amount_minor: int, line_refs) -> PaymentSheetParams:
        self.requests.append((amount_minor, list(line_refs)))
        if self.error is not None:
            raise self.error
        n = len(self.requests)
        return PaymentSheetParams(payment_intent=f"pi_{n}_secret", ephemeral_key=f"ek_{n}", customer="cus_1")


@dataclass
class FakePaymentSheet:
    """Scripted payment sheet: ``outcomes`` are returned by successive ``present`` calls."""

    outcomes: list[PaymentSheetResult] = field(default_factory=list)
    init_error: PaymentSheetError | None = None
    initialized: list[PaymentSheetParams] = field(default_factory=list)
    presented: list[PaymentSheetParams | None] = field(default_factory=list)
    on_present: Any = None
    init_raises: Exception | None = None

    async def initialize(self, params, *, merchant_display_name, appearance):
        if self.init_raises is not None:
            raise self.init_raises
        self.initialized.append(params)
        return self.init_error

    async def present(self) -> PaymentSheetResult:
        self.presented.append(self.initialized[-1] if self.initialized else None)
        if self.on_present is not None:
            await self.on_present()
        if self.outcomes:
            return self.outcomes.pop(0)
        return PaymentSheetResult.completed()


@dataclass
class FakeSession:
    user_id: str
    email: str | None = None


@dataclass
class FakeAuth:
    session: FakeSession | None = field(default_factory=lambda: FakeSession("user-1", "tea@example.com"))

    async def get_current_session(self):
        return self.session


@pytest.fixture()
def storage() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def data_client() -> FakeDataClient:
    return FakeDataClient(
        {
            "profiles": [{"id": "user-1", "full_name": "Tea Lover", "address": "12 Leaf Street", "role": "user"}],
            "products": [
                {"id": 1, "product_name": "Green Tea", "price": 100, "status": True, "category": "Tea"},
                {"id": 2, "product_name": "Espresso Beans", "price": 45.5, "status": True, "category": "Coffee"},
                {"id": 3, "product_name": "Old Oolong", "price": 80, "status": False, "category": "Tea"},
            ],
        }
    )


@pytest.fixture()
def supabase_config() -> SupabaseConfig:
    return SupabaseConfig(url="http://backend.test", anon_key="anon-key", timeout=5)


@pytest.fixture()
def payment_config() -> PaymentConfig:
    return PaymentConfig(api_url="http://payments.test/api", merchant_display_name="Tea App", timeout=5)


@pytest.fixture()
async def http_server():
    """Start aiohttp apps on a local port without the pytest-aiohttp plugin."""
    servers: list[object] = []

    async def _make_server(app):
        from aiohttp.test_utils import TestServer

        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        return server

    try:
        yield _make_server
    finally:
        for server in servers:
            await server.close()
