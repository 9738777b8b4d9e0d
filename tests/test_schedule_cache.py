from fnmatch import fnmatchcase

import pytest

from coachmate.core.cache import cache_manager, class_schedule_key, teacher_schedule_key
from coachmate.core.config import settings

API = "/api/v1"


class InMemoryRedis:
    """Just enough of redis.asyncio.Redis for CacheManager."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value):
        self.store[key] = value
        return True

    async def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def scan_iter(self, match="*"):
        for key in list(self.store):
            if fnmatchcase(key, match):
                yield key

    async def aclose(self):
        pass


@pytest.fixture
def redis_store(client, monkeypatch):
    fake = InMemoryRedis()
    monkeypatch.setattr(cache_manager, "redis_url", "redis://cache-test")
    monkeypatch.setattr(cache_manager, "redis", fake)
    return fake


def slot_body(seed, **overrides):
    body = {
        "class_id": str(seed.class_a.id),
        "subject_id": str(seed.math.id),
        "teacher_id": str(seed.alice.id),
        "day_of_week": "MONDAY",
        "start_time": "09:00",
        "end_time": "10:00",
    }
    body.update(overrides)
    return body


async def test_class_grid_is_served_from_cache_until_a_slot_is_created(client, seed, admin_headers, redis_store):
    key = class_schedule_key(seed.tenant.id, seed.class_a.id)
    url = f"{API}/timetable/classes/{seed.class_a.id}"

    first = await client.get(url, headers=admin_headers)
    assert first.json()["slots"] == []
    assert key in redis_store.store
    assert redis_store.ttls[key] == settings.schedule_cache_ttl

    created = await client.post(f"{API}/timetable/", json=slot_body(seed), headers=admin_headers)
    assert created.status_code == 201
    assert key not in redis_store.store

    fresh = await client.get(url, headers=admin_headers)
    assert [s["id"] for s in fresh.json()["slots"]] == [created.json()["id"]]


async def test_teacher_grids_are_dropped_when_a_slot_moves(client, seed, admin_headers, redis_store):
    created = (await client.post(
        f"{API}/timetable/", json=slot_body(seed, is_primary=False), headers=admin_headers
    )).json()
    for teacher in (seed.alice, seed.bob):
        await client.get(f"{API}/timetable/teachers/{teacher.id}", headers=admin_headers)
    await client.get(
        f"{API}/timetable/teachers/{seed.alice.id}", params={"day_of_week": "MONDAY"}, headers=admin_headers
    )
    alice_all = teacher_schedule_key(seed.tenant.id, seed.alice.id)
    alice_monday = teacher_schedule_key(seed.tenant.id, seed.alice.id, "MONDAY")
    bob_all = teacher_schedule_key(seed.tenant.id, seed.bob.id)
    assert {alice_all, alice_monday, bob_all} <= set(redis_store.store)

    moved = await client.put(
        f"{API}/timetable/{created['id']}", json={"teacher_id": str(seed.bob.id)}, headers=admin_headers
    )
    assert moved.status_code == 200
    assert alice_all not in redis_store.store
    assert alice_monday not in redis_store.store
    assert bob_all not in redis_store.store

    bob_grid = await client.get(f"{API}/timetable/teachers/{seed.bob.id}", headers=admin_headers)
    assert [s["id"] for s in bob_grid.json()["slots"]] == [created["id"]]


async def test_primary_change_drops_every_teacher_grid(client, seed, admin_headers, redis_store):
    bob_slot = (await client.post(
        f"{API}/timetable/", json=slot_body(seed, teacher_id=str(seed.bob.id), is_primary=True), headers=admin_headers
    )).json()
    assert bob_slot["is_primary"] is True
    bob_key = teacher_schedule_key(seed.tenant.id, seed.bob.id)
    await client.get(f"{API}/timetable/teachers/{seed.bob.id}", headers=admin_headers)
    assert redis_store.store.get(bob_key)

    # alice's new primary demotes bob's slot
    await client.post(
        f"{API}/timetable/", json=slot_body(seed, day_of_week="TUESDAY", is_primary=True), headers=admin_headers
    )
    assert bob_key not in redis_store.store

    bob_grid = await client.get(f"{API}/timetable/teachers/{seed.bob.id}", headers=admin_headers)
    assert bob_grid.json()["slots"][0]["is_primary"] is False


async def test_deleting_a_slot_drops_its_grids(client, seed, admin_headers, redis_store):
    created = (await client.post(f"{API}/timetable/", json=slot_body(seed), headers=admin_headers)).json()
    await client.get(f"{API}/timetable/classes/{seed.class_a.id}", headers=admin_headers)
    await client.get(f"{API}/timetable/teachers/{seed.alice.id}", headers=admin_headers)
    assert len(redis_store.store) == 2

    deleted = await client.delete(f"{API}/timetable/{created['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    assert redis_store.store == {}

    class_grid = await client.get(f"{API}/timetable/classes/{seed.class_a.id}", headers=admin_headers)
    assert class_grid.json()["slots"] == []


async def test_roster_changes_drop_cached_grids(client, seed, admin_headers, redis_store):
    created = (await client.post(f"{API}/timetable/", json=slot_body(seed), headers=admin_headers)).json()
    assert created["assignment_id"] is None
    class_url = f"{API}/timetable/classes/{seed.class_a.id}"
    teacher_url = f"{API}/timetable/teachers/{seed.alice.id}"
    roster_url = f"{API}/classes/{seed.class_a.id}/teachers/"
    class_key = class_schedule_key(seed.tenant.id, seed.class_a.id)
    teacher_key = teacher_schedule_key(seed.tenant.id, seed.alice.id)

    await client.get(class_url, headers=admin_headers)
    await client.get(teacher_url, headers=admin_headers)

    assigned = await client.post(roster_url, json={"teacher_id": str(seed.alice.id)}, headers=admin_headers)
    assert assigned.status_code == 201
    assert class_key not in redis_store.store
    assert teacher_key not in redis_store.store

    class_grid = (await client.get(class_url, headers=admin_headers)).json()
    assert class_grid["slots"][0]["assignment_id"] == assigned.json()["id"]

    await client.get(teacher_url, headers=admin_headers)
    updated = await client.put(f"{roster_url}{seed.alice.id}", json={"is_primary": True}, headers=admin_headers)
    assert updated.status_code == 200
    assert class_key not in redis_store.store
    assert teacher_key not in redis_store.store

    await client.get(class_url, headers=admin_headers)
    await client.get(teacher_url, headers=admin_headers)
    removed = await client.delete(f"{roster_url}{seed.alice.id}", headers=admin_headers)
    assert removed.status_code == 204
    assert class_key not in redis_store.store
    assert teacher_key not in redis_store.store

    teacher_grid = (await client.get(teacher_url, headers=admin_headers)).json()
    assert teacher_grid["slots"][0]["assignment_id"] is None
