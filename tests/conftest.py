"""Pytest configuration and fixtures."""

import copy
import os
import time
import uuid
from collections.abc import Callable, Generator
from typing import Any
from unittest.mock import patch

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from fastapi.testclient import TestClient
from jose import jwt as jose_jwt
from jwt.algorithms import ECAlgorithm

# ES256 key pair standing in for the auth provider's signing key
TEST_SIGNING_KEY = ec.generate_private_key(ec.SECP256R1())
TEST_SIGNING_KEY_PEM = TEST_SIGNING_KEY.private_bytes(
    encoding=serialization.Encoding.PEM,
    format=serialization.PrivateFormat.PKCS8,
    encryption_algorithm=serialization.NoEncryption(),
).decode()
TEST_PUBLIC_JWK = ECAlgorithm.to_jwk(TEST_SIGNING_KEY.public_key())

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ["SUPABASE_SIGNING_KEY_JWK"] = TEST_PUBLIC_JWK
os.environ.setdefault("OPENAI_API_KEY", "sk-test-openai-key")

SERVICE_MODULES = (
    "src.core.supabase",
    "src.services.profile_service",
    "src.services.contact_service",
    "src.services.connection_service",
)


def create_test_token(
    sub: str,
    email: str | None = "test@example.com",
    exp_offset: int = 3600,
    audience: str | None = "authenticated",
    key: str = TEST_SIGNING_KEY_PEM,
) -> str:
    """Sign an ES256 access token the way the auth provider would."""
    now = int(time.time())
    payload: dict[str, Any] = {
        "sub": sub,
        "email": email,
        "role": "authenticated",
        "exp": now + exp_offset,
        "iat": now,
        "iss": "https://test-project.supabase.co/auth/v1",
    }
    if audience is not None:
        payload["aud"] = audience
    return jose_jwt.encode(payload, key, algorithm="ES256")


class FakeResponse:
    """Mimics the PostgREST APIResponse shape."""

    def __init__(self, data: Any) -> None:
        self.data = data


class FakeQuery:
    """Chainable query over one in-memory table."""

    def __init__(self, db: "FakeSupabaseClient", table: str) -> None:
        self._db = db
        self._table = table
        self._op = "select"
        self._payload: Any = None
        self._filters: list[tuple[str, Any]] = []
        self._order: tuple[str, bool] | None = None
        self._limit: int | None = None
        self._single = False

    def select(self, *_columns: str) -> "FakeQuery":
        self._op = "select"
        return self

    def insert(self, data: dict | list[dict]) -> "FakeQuery":
        self._op = "insert"
        self._payload = data
        return self

    def update(self, data: dict) -> "FakeQuery":
        self._op = "update"
        self._payload = data
        return self

    def delete(self) -> "FakeQuery":
        self._op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self._limit = count
        return self

    def maybe_single(self) -> "FakeQuery":
        self._single = True
        return self

    def _matches(self, row: dict) -> bool:
        return all(row.get(column) == value for column, value in self._filters)

    def execute(self) -> FakeResponse:
        self._db.calls.append((self._table, self._op))
        pending = self._db.failures.get((self._table, self._op))
        if pending:
            raise pending.pop(0)

        rows = self._db.tables.setdefault(self._table, [])

        if self._op == "insert":
            new_rows = self._payload if isinstance(self._payload, list) else [self._payload]
            created = []
            for row in new_rows:
                row = copy.deepcopy(row)
                row.setdefault("id", str(uuid.uuid4()))
                rows.append(row)
                created.append(copy.deepcopy(row))
            return FakeResponse(created)

        if self._op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self._payload))
                    updated.append(copy.deepcopy(row))
            return FakeResponse(updated)

        if self._op == "delete":
            removed = [row for row in rows if self._matches(row)]
            self._db.tables[self._table] = [row for row in rows if not self._matches(row)]
            return FakeResponse(removed)

        result = [copy.deepcopy(row) for row in rows if self._matches(row)]
        if self._order:
            column, desc = self._order
            result.sort(key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
        if self._limit is not None:
            result = result[: self._limit]
        if self._single:
            return FakeResponse(result[0] if result else None)
        return FakeResponse(result)


class FakeSupabaseClient:
    """In-memory stand-in for the Supabase client's table API."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict]] = {}
        self.failures: dict[tuple[str, str], list[Exception]] = {}
        self.calls: list[tuple[str, str]] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail_next(self, table: str, op: str, error: Exception, times: int = 1) -> None:
        """Make the next ``times`` executions of ``op`` on ``table`` raise ``error``."""
        self.failures.setdefault((table, op), []).extend([error] * times)

    def rows(self, table: str) -> list[dict]:
        return self.tables.get(table, [])


@pytest.fixture
def fake_supabase() -> Generator[FakeSupabaseClient, None, None]:
    """Provide an in-memory Supabase client wired into every service.

    Yields:
        FakeSupabaseClient: The shared fake database.
    """
    fake = FakeSupabaseClient()
    patchers = [patch(f"{module}.get_supabase_client", return_value=fake) for module in SERVICE_MODULES]
    for patcher in patchers:
        patcher.start()
    yield fake
    for patcher in patchers:
        patcher.stop()


@pytest.fixture
def profile_factory(fake_supabase: FakeSupabaseClient) -> Callable[..., dict[str, Any]]:
    """Insert profile rows directly into the fake database."""

    def _create(user_id: str, display_name: str, **fields: Any) -> dict[str, Any]:
        profile = {
            "user_id": user_id,
            "email": fields.pop("email", f"{display_name.split()[0].lower()}@example.com"),
            "display_name": display_name,
            "photo_url": None,
            "job_title": None,
            "company": None,
            "phone": None,
            "linked_in": None,
            "website": None,
            "bio": None,
            "created_at": "2024-01-01T00:00:00+00:00",
            "updated_at": "2024-01-01T00:00:00+00:00",
            **fields,
        }
        fake_supabase.tables.setdefault("profiles", []).append(profile)
        return copy.deepcopy(profile)

    return _create


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Build an Authorization header for a user id."""

    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_test_token(sub=user_id)}"}

    return _headers


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Clear cached settings and the global rate limiter between tests."""
    import src.core.rate_limiter as rate_limiter
    from src.api.middleware.auth import get_signing_key
    from src.core.config import get_settings

    get_settings.cache_clear()
    get_signing_key.cache_clear()
    rate_limiter._rate_limiter = None
    yield
    get_settings.cache_clear()
    get_signing_key.cache_clear()
    rate_limiter._rate_limiter = None


@pytest.fixture
def client(fake_supabase: FakeSupabaseClient) -> Generator[TestClient, None, None]:
    """Provide a test client backed by the in-memory database.

    Args:
        fake_supabase: In-memory Supabase client fixture.

    Yields:
        TestClient: FastAPI test client.
    """
    from src.main import app

    with TestClient(app) as test_client:
        yield test_client
