import uuid
from datetime import datetime, timezone

import pytest

from svc_teammate.repos.analytics_repo import AnalyticsRepo
from svc_teammate.repos.base_repo import BaseRepository, coerce_json_value
from svc_teammate.repos.generated_images_repo import GeneratedImagesRepo
from svc_teammate.repos.teammates_repo import TeammatesRepo


class FakeConn:
    def __init__(self, *, row=None, rows=None, scalar=None, status="UPDATE 0"):
        self.row = row
        self.rows = rows or []
        self.scalar = scalar
        self.status = status
        self.calls = []

    async def fetchrow(self, q, *params):
        self.calls.append((q, params))
        return self.row

    async def fetch(self, q, *params):
        self.calls.append((q, params))
        return self.rows

    async def fetchval(self, q, *params):
        self.calls.append((q, params))
        return self.scalar

    async def execute(self, q, *params):
        self.calls.append((q, params))
        return self.status


class FakePool:
    def __init__(self, conn):
        self.conn = conn

    def acquire(self):
        pool = self

        class _Ctx:
            async def __aenter__(self):
                return pool.conn

            async def __aexit__(self, *exc):
                return False

        return _Ctx()


def test_coerce_json_value():
    assert coerce_json_value(None, default=[]) == []
    assert coerce_json_value('["a", "b"]', default=[]) == ["a", "b"]
    assert coerce_json_value("a, b", default=[]) == ["a", "b"]
    assert coerce_json_value('{"k": 1}', default={}) == {"k": 1}
    assert coerce_json_value("junk", default={}) == {"raw": "junk"}


def test_convert_db_row_stringifies_ids_and_parses_json():
    rid = uuid.uuid4()
    row = {"id": rid, "user_id": None, "skills": '["x"]', "parameters": None, "name": "n"}
    converted = BaseRepository(None).convert_db_row(row)
    assert converted == {"id": str(rid), "user_id": None, "skills": ["x"], "parameters": {}, "name": "n"}


def test_prepare_jsonb_param_returns_python_objects():
    repo = BaseRepository(None)
    when = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert repo.prepare_jsonb_param({"at": when}) == {"at": str(when)}
    assert repo.prepare_jsonb_param('{"a": 1}') == {"a": 1}
    assert repo.prepare_jsonb_param(None) == {}


def test_command_count():
    assert BaseRepository.command_count("UPDATE 3") == 3
    assert BaseRepository.command_count("weird") == 0


@pytest.mark.asyncio
async def test_missing_pool_raises():
    with pytest.raises(RuntimeError, match="DB pool not initialized"):
        await GeneratedImagesRepo(None).list_images()


@pytest.mark.asyncio
async def test_list_images_builds_filters_in_order():
    conn = FakeConn()
    repo = GeneratedImagesRepo(FakePool(conn))

    await repo.list_images(user_id="u-1", image_type="human-face", limit=5)

    q, params = conn.calls[0]
    assert "user_id = $1 " in q
    assert "::uuid" not in q
    assert "parameters->>'type' = $2" in q
    assert "LIMIT $3" in q
    assert params == ("u-1", "human-face", 5)


@pytest.mark.asyncio
async def test_create_teammate_leaves_compatibility_score_null():
    now = datetime.now(timezone.utc)
    conn = FakeConn(
        row={
            "id": uuid.uuid4(), "user_id": None, "name": "Ada", "age": None, "location": None, "bio": "b",
            "skills": ["math"], "interests": [], "category": "academic", "image_url": None,
            "image_prompt": None, "compatibility_score": None, "created_at": now, "updated_at": now,
        }
    )
    repo = TeammatesRepo(FakePool(conn))

    teammate = await repo.create_teammate(name="Ada", bio="b", category="academic", skills=["math"], interests=[])

    q, params = conn.calls[0]
    assert "NULL" in q
    assert params[5] == ["math"]
    assert teammate.compatibility_score is None
    assert teammate.skills == ["math"]


@pytest.mark.asyncio
async def test_deactivate_sessions_counts_rows():
    conn = FakeConn(status="UPDATE 4")
    repo = AnalyticsRepo(FakePool(conn))
    cutoff = datetime.now(timezone.utc)

    assert await repo.deactivate_sessions_before(cutoff) == 4
    assert "is_active = true" in conn.calls[0][0]

    assert await repo.deactivate_sessions_before(cutoff, only_active=False) == 4
    assert "is_active = true" not in conn.calls[1][0]


@pytest.mark.asyncio
async def test_create_image_passes_string_ids_through():
    conn = FakeConn(scalar="img-1")
    repo = GeneratedImagesRepo(FakePool(conn))

    await repo.create_image(
        prompt="p", image_url="https://x/y.png", model="m", provider="flux", provider_id=None,
        user_id="user-123", teammate_id="tm-9",
    )

    q, params = conn.calls[0]
    assert "::uuid" not in q
    assert "user-123" in params
    assert "tm-9" in params
