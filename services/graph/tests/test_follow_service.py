import asyncio
from uuid import uuid4

import pytest

from app.exceptions import CannotFollowSelf, UserNotFound
from app.follows.service import FollowCounts, FollowService


@pytest.mark.asyncio
async def test_follow_is_idempotent(store) -> None:
    alice, bob = store.add_user(), store.add_user()
    svc = FollowService(store)

    assert await svc.follow_user(alice, bob) is True
    assert await svc.follow_user(alice, bob) is True

    assert len(store.follows) == 1
    assert await svc.get_follow_status(alice, bob) is True


@pytest.mark.asyncio
async def test_concurrent_follows_leave_one_edge(store) -> None:
    alice, bob = store.add_user(), store.add_user()
    svc = FollowService(store)

    results = await asyncio.gather(*(svc.follow_user(alice, bob) for _ in range(5)))

    assert results == [True] * 5
    assert await svc.get_follow_counts(bob) == FollowCounts(followers=1, following=0)


@pytest.mark.asyncio
async def test_follow_is_one_directional(store) -> None:
    alice, bob = store.add_user(), store.add_user()
    svc = FollowService(store)
    await svc.follow_user(alice, bob)

    assert await svc.get_follow_status(bob, alice) is False
    assert await svc.get_follow_counts(alice) == FollowCounts(followers=0, following=1)


@pytest.mark.asyncio
async def test_cannot_follow_self(store) -> None:
    alice = store.add_user()
    with pytest.raises(CannotFollowSelf) as exc:
        await FollowService(store).follow_user(alice, alice)
    assert exc.value.status_code == 422
    assert store.follows == {}


@pytest.mark.asyncio
async def test_follow_unknown_user_is_not_found(store) -> None:
    alice = store.add_user()
    with pytest.raises(UserNotFound):
        await FollowService(store).follow_user(alice, uuid4())


@pytest.mark.asyncio
async def test_unfollow_is_idempotent(store) -> None:
    alice, bob = store.add_user(), store.add_user()
    svc = FollowService(store)
    await svc.follow_user(alice, bob)

    assert await svc.unfollow_user(alice, bob) is False
    assert await svc.unfollow_user(alice, bob) is False
    assert await svc.get_follow_status(alice, bob) is False


@pytest.mark.asyncio
async def test_followers_and_following_lists(store, clock) -> None:
    me = store.add_user("Me")
    fans = [store.add_user(f"Fan {i}") for i in range(3)]
    svc = FollowService(store)
    for fan in fans:
        await svc.follow_user(fan, me)
        clock.advance(minutes=1)
    idol = store.add_user("Idol")
    await svc.follow_user(me, idol)

    followers, total = await svc.get_followers(me, limit=2, offset=0)
    assert total == 3
    assert [e.user.id for e in followers] == [fans[2], fans[1]]

    rest, _ = await svc.get_followers(me, limit=2, offset=2)
    assert [e.user.id for e in rest] == [fans[0]]

    following, total = await svc.get_following(me, limit=20, offset=0)
    assert total == 1
    assert following[0].user.id == idol
