"""Shared fixtures and fakes for TableTalk tests."""

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from tabletalk.auth import StaticSessionProvider
from tabletalk.config import get_settings
from tabletalk.core.dataset_store import DATASET_STORE
from tabletalk.core.orchestrator import QueryOrchestrator
from tabletalk.core.prompt_builder import ModelIntent, ModelRequest
from tabletalk.core.reasoning_client import ReasoningClient
from tabletalk.core.tabular_parser import parse
from tabletalk.modules.conversations.service import reset_sessions
from tabletalk.observability import MetricsStore


class FakeReasoningClient(ReasoningClient):
    """Scripted reasoning service: one reply (or exception) per intent."""

    def __init__(self, replies: dict | None = None):
        self.replies = dict(replies or {})
        self.calls: list[tuple[ModelRequest, str]] = []

    async def complete(self, request: ModelRequest, *, session_token: str) -> str:
        self.calls.append((request, session_token))
        reply = self.replies.get(request.intent, "")
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeQuery:
    """Chainable stand-in for a Supabase table query over a list of row dicts."""

    def __init__(self, rows: list[dict]):
        self._rows = rows
        self._filters: list[tuple[str, object]] = []
        self._order: tuple[str, bool] | None = None
        self._limit: int | None = None
        self._insert: dict | None = None
        self._update: dict | None = None
        self._delete = False

    def select(self, _columns):
        return self

    def eq(self, key, value):
        self._filters.append((key, value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def insert(self, data):
        self._insert = data
        return self

    def update(self, data):
        self._update = data
        return self

    def delete(self):
        self._delete = True
        return self

    def execute(self):
        if self._insert is not None:
            row = {"id": str(uuid4()), "created_at": datetime.now(timezone.utc).isoformat(), **self._insert}
            self._rows.append(row)
            return SimpleNamespace(data=[row])

        rows = [r for r in self._rows if all(r.get(k) == v for k, v in self._filters)]
        if self._update is not None:
            for r in rows:
                r.update(self._update)
            return SimpleNamespace(data=[dict(r) for r in rows])
        if self._delete:
            self._rows[:] = [r for r in self._rows if r not in rows]
            return SimpleNamespace(data=rows)

        if self._order:
            column, desc = self._order
            rows = sorted(rows, key=lambda r: r[column], reverse=desc)
        if self._limit is not None:
            rows = rows[: self._limit]
        return SimpleNamespace(data=rows)


class FakeBucket:
    def __init__(self, objects: dict[str, bytes]):
        self.objects = objects

    def upload(self, path, file, file_options=None):
        self.objects[path] = file
        return SimpleNamespace(path=path)

    def download(self, path):
        return self.objects[path]

    def remove(self, paths):
        return [{"name": p} for p in paths if self.objects.pop(p, None) is not None]


class FakeStorage:
    def __init__(self):
        self.buckets: dict[str, dict[str, bytes]] = {}

    def from_(self, bucket):
        return FakeBucket(self.buckets.setdefault(bucket, {}))


class FakeSupabase:
    """In-memory Supabase client: tables plus storage buckets."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {"conversations": [], "messages": [], "uploaded_files": []}
        self.storage = FakeStorage()

    def table(self, name):
        return FakeQuery(self.tables[name])

SALES_CSV = b"name,age\nAlice,30\nBob,25\n"

GOOD_QUESTIONS = (
    '["Who is oldest?", "What is the average age?", "How many people are there?", '
    '"Who is youngest?", "What is the age range?"]'
)

GOOD_ANSWER = (
    '{"answer": "Alice is the oldest.", '
    '"chartData": {"type": "bar", "data": [{"name": "Alice", "value": 30}, {"name": "Bob", "value": 25}]}}'
)


def default_replies() -> dict:
    return {
        ModelIntent.ANALYZE_DATASET: "A list of people and their ages.",
        ModelIntent.SUGGEST_QUESTIONS: GOOD_QUESTIONS,
        ModelIntent.ANSWER_QUESTION: GOOD_ANSWER,
    }


@pytest.fixture
def fake_client():
    return FakeReasoningClient(default_replies())


@pytest.fixture
def metrics():
    return MetricsStore()


@pytest.fixture
def orchestrator(fake_client, metrics):
    return QueryOrchestrator(
        client=fake_client,
        sessions=StaticSessionProvider("test-token"),
        metrics=metrics,
    )


@pytest.fixture
def dataset():
    return parse(SALES_CSV, "people.csv")


@pytest.fixture(autouse=True)
def _clean_state():
    """Process-wide state must not leak between tests."""
    get_settings.cache_clear()
    reset_sessions()
    DATASET_STORE.clear()
    yield
    get_settings.cache_clear()
    reset_sessions()
    DATASET_STORE.clear()
