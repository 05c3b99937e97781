import asyncio
import json

import httpx
import pytest

from clubhub.domain.registry.store import RegistryStore
from clubhub.domain.sync import engine as engine_module
from clubhub.domain.sync.codec import DecodeError
from clubhub.domain.sync.engine import SyncEngine
from clubhub.infra.local_cache import LocalCache
from clubhub.infra.remote import RemoteStateClient

from conftest import make_teacher

ENDPOINT = "https://sheets.example/exec"


class FakeEndpoint:
    def __init__(self, state=None, *, fail_get=False, fail_post=0):
        self.state = state
        self.fail_get = fail_get
        self.fail_post = fail_post
        self.posts = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            if self.fail_get:
                return httpx.Response(503)
            return httpx.Response(200, json=self.state or {"error": "no data"})
        if self.fail_post:
            self.fail_post -= 1
            return httpx.Response(500)
        self.posts.append((request.headers.get("content-type"), json.loads(request.content.decode("utf-8"))))
        return httpx.Response(200, json={"status": "ok"})

    def client(self) -> RemoteStateClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return RemoteStateClient(ENDPOINT, timeout=1.0, http=http)


def _engine(store, endpoint=None, tmp_path=None, debounce=0.02, retry_max=0.1):
    return SyncEngine(
        store,
        remote=endpoint.client() if endpoint else None,
        cache=LocalCache(tmp_path / "state.json") if tmp_path else None,
        debounce_seconds=debounce,
        retry_max_seconds=retry_max,
    )



async def _wait_for(predicate, timeout=1.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        assert asyncio.get_running_loop().time() < deadline
        await asyncio.sleep(0.005)

@pytest.mark.asyncio
async def test_load_prefers_remote(tmp_path):
    endpoint = FakeEndpoint({"teachers": [{"id": "T001", "name": "A", "department": "ศิลปะ"}]})
    store = RegistryStore()
    engine = _engine(store, endpoint, tmp_path)
    assert await engine.load() == "remote"
    assert store.get_teacher("T001") is not None
    assert engine.status().loaded is True
    assert engine.status().source == "remote"


@pytest.mark.asyncio
async def test_load_falls_back_to_cache_then_default(tmp_path):
    LocalCache(tmp_path / "state.json").write({"teachers": [{"id": "T009", "name": "C", "department": "ศิลปะ"}]})
    store = RegistryStore()
    assert await _engine(store, FakeEndpoint(fail_get=True), tmp_path).load() == "cache"
    assert store.get_teacher("T009") is not None

    empty = RegistryStore()
    assert await _engine(empty, FakeEndpoint(), tmp_path / "nothing").load() == "default"
    assert empty.teachers == []
    assert len(empty.announcements) == 1


@pytest.mark.asyncio
async def test_rapid_mutations_collapse_into_one_push(tmp_path):
    endpoint = FakeEndpoint()
    store = RegistryStore()
    engine = _engine(store, endpoint, tmp_path, debounce=0.05)
    for index in range(3):
        store.teachers.append(make_teacher(f"T00{index}"))
        engine.notify_state_changed()
    assert engine.status().state == "pending"
    await asyncio.sleep(0.3)
    assert len(endpoint.posts) == 1
    content_type, body = endpoint.posts[0]
    assert content_type.startswith("text/plain")
    assert body["action"] == "syncAll"
    assert [t["id"] for t in body["data"]["teachers"]] == ["T000", "T001", "T002"]
    status = engine.status()
    assert status.state == "idle"
    assert status.revision == 3
    assert status.last_synced_at is not None
    cached = json.loads((tmp_path / "state.json").read_text(encoding="utf-8"))
    assert len(cached["teachers"]) == 3
    await engine.shutdown()


@pytest.mark.asyncio
async def test_failed_push_writes_cache_and_retries(tmp_path):
    endpoint = FakeEndpoint(fail_post=2)
    store = RegistryStore()
    engine = _engine(store, endpoint, tmp_path, debounce=0.01, retry_max=0.05)
    store.teachers.append(make_teacher("T001"))
    engine.notify_state_changed()
    await asyncio.sleep(0.05)
    assert (tmp_path / "state.json").exists()
    await asyncio.sleep(0.4)
    assert len(endpoint.posts) == 1
    status = engine.status()
    assert status.state == "idle"
    assert status.consecutive_failures == 0
    assert status.last_error is None
    await engine.shutdown()


@pytest.mark.asyncio
async def test_push_now_reports_failure_state(tmp_path):
    endpoint = FakeEndpoint(fail_post=1)
    engine = _engine(RegistryStore(), endpoint, tmp_path)
    assert await engine.push_now() is False
    status = engine.status()
    assert status.state == "error"
    assert status.consecutive_failures == 1
    assert "push failed" in status.last_error
    assert await engine.push_now() is True
    assert engine.status().state == "idle"
    await engine.shutdown()


@pytest.mark.asyncio
async def test_shutdown_flushes_pending_push(tmp_path):
    endpoint = FakeEndpoint()
    store = RegistryStore()
    engine = _engine(store, endpoint, tmp_path, debounce=30)
    store.teachers.append(make_teacher("T001"))
    engine.notify_state_changed()
    await engine.shutdown()
    assert len(endpoint.posts) == 1
    assert engine.status().state == "idle"


@pytest.mark.asyncio
async def test_cache_only_mode_without_remote(tmp_path):
    store = RegistryStore()
    engine = _engine(store, None, tmp_path)
    assert await engine.load() == "default"
    store.teachers.append(make_teacher("T001"))
    assert await engine.push_now() is True
    reloaded = RegistryStore()
    assert await _engine(reloaded, None, tmp_path).load() == "cache"
    assert reloaded.get_teacher("T001") is not None


@pytest.mark.asyncio
async def test_load_tolerates_non_finite_capacity(tmp_path):
    body = b'{"clubs":[{"id":"x","name":"X","advisorId":"T001","capacity":Infinity}]}'

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body, headers={"content-type": "application/json"})

    remote = RemoteStateClient(ENDPOINT, timeout=1.0, http=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    store = RegistryStore()
    assert await SyncEngine(store, remote=remote).load() == "remote"
    assert store.get_club("x").capacity == 25

    (tmp_path / "state.json").write_text('{"clubs":[{"id":"y","name":"Y","advisorId":"T001","capacity":1e999}]}', encoding="utf-8")
    cached = RegistryStore()
    assert await _engine(cached, FakeEndpoint(fail_get=True), tmp_path).load() == "cache"
    assert cached.get_club("y").capacity == 25


@pytest.mark.asyncio
async def test_load_falls_through_undecodable_sources(tmp_path, monkeypatch):
    real_decode = engine_module.decode_aggregate

    def picky_decode(payload):
        if payload.get("broken"):
            raise DecodeError("undecodable aggregate")
        return real_decode(payload)

    monkeypatch.setattr(engine_module, "decode_aggregate", picky_decode)
    LocalCache(tmp_path / "state.json").write({"teachers": [{"id": "T009", "name": "C", "department": "ศิลปะ"}]})
    store = RegistryStore()
    assert await _engine(store, FakeEndpoint({"broken": True}), tmp_path).load() == "cache"
    assert store.get_teacher("T009") is not None

    LocalCache(tmp_path / "state.json").write({"broken": True})
    empty = RegistryStore()
    engine = _engine(empty, FakeEndpoint({"broken": True}), tmp_path)
    assert await engine.load() == "default"
    assert empty.teachers == []
    assert engine.status().loaded is True


@pytest.mark.asyncio
async def test_stale_push_landing_last_triggers_another_push(tmp_path):
    gate = asyncio.Event()
    held = asyncio.Event()
    landed = []

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            body = json.loads(request.content.decode("utf-8"))
            if not held.is_set():
                held.set()
                await gate.wait()
            landed.append([teacher["id"] for teacher in body["data"]["teachers"]])
        return httpx.Response(200, json={"status": "ok"})

    remote = RemoteStateClient(ENDPOINT, timeout=5.0, http=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    store = RegistryStore()
    engine = SyncEngine(store, remote=remote, cache=LocalCache(tmp_path / "state.json"), debounce_seconds=0.02)

    store.teachers.append(make_teacher("T001"))
    engine.notify_state_changed()
    await _wait_for(held.is_set)
    store.teachers.append(make_teacher("T002"))
    engine.notify_state_changed()
    await _wait_for(lambda: len(landed) == 1)
    assert landed[0] == ["T001", "T002"]

    gate.set()
    await _wait_for(lambda: len(landed) == 3)
    assert landed[1] == ["T001"]
    assert landed[2] == ["T001", "T002"]
    cached = json.loads((tmp_path / "state.json").read_text(encoding="utf-8"))
    assert [teacher["id"] for teacher in cached["teachers"]] == ["T001", "T002"]
    await engine.shutdown()
