"""
Shared fixtures: a recording stand-in for the Supabase client and an
AsyncClient wired to the app with every client dependency overridden.
"""

from collections import defaultdict, deque
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient, ASGITransport

from cando.core.rate_limiter import rate_limiter
from cando.core.dependencies import get_current_user_id
from cando.database.supabase_client import get_supabase, get_service_supabase, get_user_supabase
from cando.main import app as cando_app

USER_ID = "11111111-1111-4111-8111-111111111111"
OTHER_USER_ID = "22222222-2222-4222-8222-222222222222"
COMPANY_ID = "33333333-3333-4333-8333-333333333333"
OTHER_COMPANY_ID = "44444444-4444-4444-8444-444444444444"


class FakeResponse:
    def __init__(self, data: Any = None, count: Optional[int] = None):
        self.data = data
        self.count = count


class FakeQuery:
    """Records every chained builder call; execute() pops the next scripted result"""

    def __init__(self, client: "FakeSupabase", target: str, params: Optional[dict] = None):
        self.client = client
        self.target = target
        self.params = params
        self.ops: List[tuple] = []

    def __getattr__(self, name: str):
        if name.startswith("__"):
            raise AttributeError(name)

        def record(*args, **kwargs):
            self.ops.append((name, args, kwargs))
            return self
        return record

    def op(self, name: str) -> Optional[tuple]:
        """Positional args of the first call to name, or None"""
        for op_name, args, _ in self.ops:
            if op_name == name:
                return args
        return None

    def has(self, name: str) -> bool:
        return self.op(name) is not None

    def execute(self) -> FakeResponse:
        self.client.executed.append(self)
        return self.client._next_result(self.target, self.params is not None)


class FakeSupabase:
    def __init__(self):
        self.executed: List[FakeQuery] = []
        self._results: Dict[str, deque] = defaultdict(deque)
        self.storage = MagicMock()
        self.auth = MagicMock()
        self.postgrest = MagicMock()

    def respond(self, target: str, data: Any = None, count: Optional[int] = None) -> "FakeSupabase":
        self._results[target].append(FakeResponse(data, count))
        return self

    def fail(self, target: str, error: Exception) -> "FakeSupabase":
        self._results[target].append(error)
        return self

    def _next_result(self, target: str, is_rpc: bool) -> FakeResponse:
        queue = self._results[target]
        if not queue:
            return FakeResponse(None if is_rpc else [])
        result = queue.popleft()
        if isinstance(result, Exception):
            raise result
        return result

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    from_ = table

    def rpc(self, name: str, params: Optional[dict] = None) -> FakeQuery:
        return FakeQuery(self, name, params or {})

    def calls(self, target: str) -> List[FakeQuery]:
        return [q for q in self.executed if q.target == target]

    def writes(self, target: str) -> List[FakeQuery]:
        return [q for q in self.calls(target) if q.has("insert") or q.has("update") or q.has("delete")]


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.clear()
    yield
    rate_limiter.clear()


@pytest.fixture
def supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def current_user() -> dict:
    return {"id": USER_ID, "email": "owner@example.com", "user_metadata": {}, "app_metadata": {}}


@pytest.fixture
def app(supabase, current_user):
    cando_app.dependency_overrides[get_supabase] = lambda: supabase
    cando_app.dependency_overrides[get_service_supabase] = lambda: supabase
    cando_app.dependency_overrides[get_user_supabase] = lambda: supabase
    cando_app.dependency_overrides[get_current_user_id] = lambda: current_user
    yield cando_app
    cando_app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": "Bearer test-token"}
    ) as ac:
        yield ac
