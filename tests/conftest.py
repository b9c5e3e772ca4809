# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - An in-memory stand-in for the Supabase query builder, installed as the
#   SupabaseClient singleton, so services run against real-looking rows
# - Helpers to insert users/people/events and to log in through the API
# =============================================================================

import os
import re
import uuid
from datetime import datetime, timezone
from typing import Any

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-session-tokens")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("APP_URL", "http://localhost:5173")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:5173")
os.environ.setdefault("LUMA_API_KEY", "test-luma-key")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_123")
os.environ.setdefault("STRIPE_PRICE_ID", "price_test_123")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_123")

import pytest

from lib.supabase_client import SupabaseClient


# =============================================================================
# In-memory Supabase
# =============================================================================

def _norm(value: Any) -> Any:
    if value is None or isinstance(value, bool):
        return value
    return str(value)


def _like_to_regex(pattern: str) -> re.Pattern:
    escaped = re.escape(pattern).replace("%", ".*").replace("_", ".")
    return re.compile(f"^{escaped}$", re.IGNORECASE | re.DOTALL)


class FakeResponse:
    def __init__(self, data: list[dict[str, Any]], count: int | None = None):
        self.data = data
        self.count = count


class FakeQuery:
    """
    Chainable query over one in-memory table.

    Supports the subset of the postgrest builder the services use.
    """

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.payload: Any = None
        self.on_conflict = "id"
        self.filters: list = []
        self.orders: list[tuple[str, bool]] = []
        self.window: tuple[int, int] | None = None
        self.max_rows: int | None = None
        self.want_count = False

    @property
    def rows(self) -> list[dict[str, Any]]:
        return self.db.tables.setdefault(self.table_name, [])

    # -- operations ----------------------------------------------------------

    def select(self, columns: str = "*", count: str | None = None):
        self.operation = "select"
        self.want_count = count is not None
        return self

    def insert(self, payload):
        self.operation, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.operation, self.payload = "update", payload
        return self

    def upsert(self, payload, on_conflict: str = "id"):
        self.operation, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def delete(self):
        self.operation = "delete"
        return self

    # -- filters -------------------------------------------------------------

    def eq(self, column, value):
        self.filters.append(lambda r: _norm(r.get(column)) == _norm(value))
        return self

    def neq(self, column, value):
        self.filters.append(lambda r: _norm(r.get(column)) != _norm(value))
        return self

    def in_(self, column, values):
        wanted = {_norm(v) for v in values}
        self.filters.append(lambda r: _norm(r.get(column)) in wanted)
        return self

    def is_(self, column, value):
        if value in (None, "null"):
            self.filters.append(lambda r: r.get(column) is None)
        else:
            self.filters.append(lambda r: r.get(column) is value)
        return self

    def ilike(self, column, pattern):
        regex = _like_to_regex(pattern)
        self.filters.append(lambda r: r.get(column) is not None and bool(regex.match(str(r.get(column)))))
        return self

    def _compare(self, column, value, op):
        def check(row):
            current = row.get(column)
            if current is None:
                return False
            return op(str(current), str(value))
        self.filters.append(check)
        return self

    def gt(self, column, value):
        return self._compare(column, value, lambda a, b: a > b)

    def gte(self, column, value):
        return self._compare(column, value, lambda a, b: a >= b)

    def lt(self, column, value):
        return self._compare(column, value, lambda a, b: a < b)

    def lte(self, column, value):
        return self._compare(column, value, lambda a, b: a <= b)

    def or_(self, expression: str):
        checks = []
        for clause in expression.split(","):
            column, op, value = clause.split(".", 2)
            if op == "ilike":
                regex = _like_to_regex(value)
                checks.append(lambda r, c=column, rx=regex: r.get(c) is not None and bool(rx.match(str(r.get(c)))))
            elif op == "eq":
                checks.append(lambda r, c=column, v=value: _norm(r.get(c)) == v)
        self.filters.append(lambda r: any(check(r) for check in checks))
        return self

    # -- shaping -------------------------------------------------------------

    def order(self, column, desc: bool = False):
        self.orders.append((column, desc))
        return self

    def range(self, start, end):
        self.window = (start, end)
        return self

    def limit(self, n):
        self.max_rows = n
        return self

    # -- execution -----------------------------------------------------------

    def _matching(self) -> list[dict[str, Any]]:
        return [r for r in self.rows if all(f(r) for f in self.filters)]

    def _new_row(self, values: dict[str, Any]) -> dict[str, Any]:
        row = dict(values)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self.db.next_timestamp())
        self.rows.append(row)
        return dict(row)

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table_name, self.operation))

        if self.operation == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            return FakeResponse([self._new_row(p) for p in payload])

        if self.operation == "upsert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            result = []
            for values in payload:
                key = values.get(self.on_conflict)
                existing = next(
                    (r for r in self.rows if key is not None and _norm(r.get(self.on_conflict)) == _norm(key)),
                    None,
                )
                if existing is not None:
                    existing.update(values)
                    result.append(dict(existing))
                else:
                    result.append(self._new_row(values))
            return FakeResponse(result)

        matched = self._matching()

        if self.operation == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(r) for r in matched])

        if self.operation == "delete":
            ids = {id(r) for r in matched}
            self.db.tables[self.table_name] = [r for r in self.rows if id(r) not in ids]
            return FakeResponse([dict(r) for r in matched])

        rows = list(matched)
        for column, desc in reversed(self.orders):
            rows.sort(key=lambda r: (r.get(column) is None, r.get(column) if r.get(column) is not None else 0), reverse=desc)
        total = len(rows)
        if self.window is not None:
            rows = rows[self.window[0]:self.window[1] + 1]
        if self.max_rows is not None:
            rows = rows[:self.max_rows]
        return FakeResponse([dict(r) for r in rows], count=total if self.want_count else None)


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        if self.storage.fail_uploads:
            raise RuntimeError("storage unavailable")
        self.storage.objects[path] = file
        return {"path": path}

    def download(self, path):
        if path not in self.storage.objects:
            raise RuntimeError("Object not found")
        return self.storage.objects[path]

    def remove(self, paths):
        for path in paths:
            self.storage.objects.pop(path, None)
        return [{"name": p} for p in paths]


class FakeStorage:
    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.fail_uploads = False

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)

    def list_buckets(self):
        return [{"name": "media"}]


class FakeSupabase:
    """Just enough of supabase.Client for the service layer."""

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.storage = FakeStorage()
        self.calls: list[tuple[str, str]] = []
        self._tick = 0

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def next_timestamp(self) -> str:
        # Strictly increasing so "newest first" orderings are deterministic
        self._tick += 1
        return datetime(2025, 1, 1, 12, 0, self._tick % 60, self._tick, tzinfo=timezone.utc).isoformat()

    def rows(self, name: str) -> list[dict[str, Any]]:
        return self.tables.setdefault(name, [])

    def add(self, table: str, /, **values) -> dict[str, Any]:
        return self.table(table).insert(values).execute().data[0]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def db():
    """Fresh in-memory database installed as the Supabase client."""
    fake = FakeSupabase()
    previous = SupabaseClient._instance
    SupabaseClient._instance = fake
    yield fake
    SupabaseClient._instance = previous


@pytest.fixture
def seeded_roles(db):
    """Permission catalog and built-in roles with their required pairs."""
    from core.services.role_service import DEFAULT_PERMISSIONS, REQUIRED_ROLE_PERMISSIONS

    permissions = {
        name: db.add("permissions", name=name, resource=resource, action=action, description=description)
        for name, resource, action, description in DEFAULT_PERMISSIONS
    }
    roles = {}
    for role_name, required in REQUIRED_ROLE_PERMISSIONS.items():
        roles[role_name] = db.add("roles", name=role_name, description=None, is_system=True)
        for permission_name in sorted(required):
            db.add(
                "role_permissions",
                role_id=roles[role_name]["id"],
                permission_id=permissions[permission_name]["id"],
            )
    return {"roles": roles, "permissions": permissions}


@pytest.fixture
def make_user(db):
    """Insert a verified user row; keyword arguments override defaults."""
    from lib.security import hash_password

    def _make(email: str = "member@example.com", password: str = "correct-horse", **overrides):
        values = {
            "email": email,
            "password": hash_password(password),
            "display_name": email.split("@")[0].title(),
            "is_verified": True,
            "is_admin": False,
            "person_id": None,
            "subscription_status": "inactive",
            "premium_source": None,
            "premium_expires_at": None,
            "custom_links": [],
        }
        values.update(overrides)
        return db.add("users", **values)

    return _make


@pytest.fixture
def client(db):
    """FastAPI TestClient wired to the in-memory database."""
    from fastapi.testclient import TestClient
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    """Bearer header for a user row (cookie-less API access)."""
    from lib.security import create_session_token

    def _headers(user: dict[str, Any]) -> dict[str, str]:
        token = create_session_token(str(user["id"]), user["email"], bool(user.get("is_admin")))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def luma_entries():
    """Raw Luma list payloads for events and people."""
    return {
        "events": [
            {
                "api_id": "evt-AAA111",
                "event": {
                    "api_id": "evt-AAA111",
                    "name": "Founders Breakfast",
                    "start_at": "2025-03-01T14:00:00Z",
                    "end_at": "2025-03-01T16:00:00Z",
                    "url": "https://lu.ma/founders",
                    "geo_address_json": {"city": "Sarasota", "region": "FL"},
                    "geo_latitude": "27.33",
                    "geo_longitude": "-82.53",
                },
            },
            {
                "api_id": "evt-BBB222",
                "event": {
                    "api_id": "evt-BBB222",
                    "name": "AI Night",
                    "start_at": "2025-04-10T22:00:00Z",
                    "end_at": "2025-04-11T01:00:00Z",
                },
            },
        ],
        "people": [
            {
                "api_id": "usr-Jane01",
                "email": "Jane@Example.com",
                "user": {"name": "Jane Doe", "avatar_url": "https://img/jane.png", "job_title": "CTO"},
            },
            {
                "api_id": "usr-Sam002",
                "email": "sam@example.com",
                "user": {"name": None},
            },
        ],
    }
