import pytest

from app.distributed_lock import DistributedLock, DistributedLockError, multi_lock


async def test_multi_lock_takes_and_releases_every_key(redis_client):
    async with multi_lock(redis_client, ["table:2", "reservation:5"]):
        assert set(redis_client.store) == {"lock:table:2", "lock:reservation:5"}

    assert redis_client.store == {}


async def test_multi_lock_fails_when_a_key_is_held(redis_client):
    redis_client.store["lock:table:2"] = "other"

    with pytest.raises(DistributedLockError):
        async with multi_lock(redis_client, ["reservation:5", "table:2"], blocking=False):
            pass

    assert redis_client.store == {"lock:table:2": "other"}


async def test_release_leaves_foreign_lock_alone(redis_client):
    lock = DistributedLock(redis_client, "table:3")
    assert await lock.acquire(blocking=False)

    redis_client.store["lock:table:3"] = "stolen"

    assert await lock.release() is False
    assert redis_client.store == {"lock:table:3": "stolen"}
