"""
Shared fixtures for Portal Service tests.
"""

import asyncio
import copy
from typing import Any, Dict, List, Mapping, Optional

import pytest

from service_portal.app.adapters import DataStore, Order
from service_portal.app.caching import QueryCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDataStore(DataStore):
    """In-memory DataStore that records every call."""

    name = "fake"

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None, delay: float = 0.0):
        self.tables = copy.deepcopy(tables or {})
        self.delay = delay
        self.calls: List[tuple] = []
        self.failures: Dict[str, Exception] = {}
        self._next_id = 0

    def fail_next(self, method: str, exc: Exception) -> None:
        self.failures[method] = exc

    def count(self, method: str, table: Optional[str] = None) -> int:
        return sum(1 for call in self.calls if call[0] == method and (table is None or call[1] == table))

    async def _enter(self, method: str, table: str, filters: Optional[Mapping[str, Any]]) -> None:
        self.calls.append((method, table, dict(filters or {})))
        if self.delay:
            await asyncio.sleep(self.delay)
        exc = self.failures.pop(method, None)
        if exc is not None:
            raise exc

    def _matching(self, table: str, filters: Optional[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        rows = self.tables.get(table, [])
        return [row for row in rows if all(row.get(k) == v for k, v in (filters or {}).items())]

    async def select(self, table, filters=None, order: Optional[Order] = None, single=False):
        await self._enter("select", table, filters)
        rows = self._matching(table, filters)
        if order is not None:
            rows = sorted(rows, key=lambda row: row.get(order.column) or "", reverse=not order.ascending)
        if single:
            return copy.deepcopy(rows[0]) if len(rows) == 1 else None
        return copy.deepcopy(rows)

    async def insert(self, table, values):
        await self._enter("insert", table, None)
        row = dict(values)
        if "id" not in row:
            self._next_id += 1
            row["id"] = f"{table}-{self._next_id}"
        self.tables.setdefault(table, []).append(row)
        return copy.deepcopy(row)

    async def update(self, table, filters, values):
        await self._enter("update", table, filters)
        rows = self._matching(table, filters)
        if not rows:
            return None
        rows[0].update(values)
        return copy.deepcopy(rows[0])

    async def delete(self, table, filters):
        await self._enter("delete", table, filters)
        doomed = self._matching(table, filters)
        self.tables[table] = [row for row in self.tables.get(table, []) if row not in doomed]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def query_cache(clock):
    return QueryCache(300, clock=clock)


@pytest.fixture
def profile_rows():
    return [
        {
            "id": "u1",
            "email": "leyla@example.com",
            "name": "Leyla Mammadova",
            "role": "staff",
            "status": "active",
            "created_at": "2025-01-02T10:00:00+00:00",
        },
        {
            "id": "u2",
            "email": "rashad@example.com",
            "name": "Rashad Hasanov",
            "role": "teacher",
            "status": "active",
            "created_at": "2025-01-05T10:00:00+00:00",
        },
    ]


@pytest.fixture
def news_rows():
    return [
        {
            "id": "news-1",
            "title": "New SERP Module Released",
            "excerpt": "Enhanced features",
            "content": "Full content about the new SERP module release...",
            "category": "Product Updates",
            "date": "2025-12-01",
        },
        {
            "id": "news-2",
            "title": "Tax Law Changes 2025",
            "excerpt": "Important tax law changes",
            "content": "Full content about tax law changes...",
            "category": "Tax Updates",
            "date": "2025-11-25",
        },
    ]


@pytest.fixture
def training_rows():
    return [
        {
            "id": "hr-management",
            "title": "HR Management Best Practices",
            "description": "Comprehensive HR management training",
            "category": "HR Training",
            "duration": "3 days",
            "trainer": "HR Expert",
            "price": "$399",
            "date": "2025-02-01",
        },
        {
            "id": "serp-basics",
            "title": "SERP System Fundamentals",
            "description": "Learn the basics of SERP",
            "category": "SERP Training",
            "duration": "2 days",
            "trainer": "Expert Trainer",
            "price": "$299",
            "date": "2025-01-15",
        },
    ]


@pytest.fixture
def data_store(profile_rows, news_rows, training_rows):
    return FakeDataStore({
        "profiles": profile_rows,
        "news": news_rows,
        "trainings": training_rows,
    })
