from uuid import uuid4

import pytest

from app.blocks.constants import ReportReason, ReportStatus, ReportTargetType
from app.blocks.service import BlockService
from app.connections.service import ConnectionService
from app.exceptions import CannotBlockSelf, CannotReportSelf, UserNotFound


@pytest.mark.asyncio
async def test_block_removes_accepted_connection(store, clock) -> None:
    alice, bob = store.add_user(), store.add_user()
    connections = ConnectionService(store, clock=clock)
    c = await connections.send_request(alice, bob)
    await connections.accept_request(c.id, bob)

    await BlockService(store).block_user(bob, alice)

    assert store.connections == {}
    assert (await connections.list_connections(alice)).items == []
    assert (await connections.list_connections(bob)).items == []


@pytest.mark.asyncio
async def test_block_removes_pending_requests_both_ways(store, clock) -> None:
    alice, bob, carol = store.add_user(), store.add_user(), store.add_user()
    connections = ConnectionService(store, clock=clock)
    await connections.send_request(alice, bob)
    kept = await connections.send_request(alice, carol)

    await BlockService(store).block_user(bob, alice)

    assert list(store.connections) == [kept.id]
    assert (await connections.list_pending(bob)).incoming == []


@pytest.mark.asyncio
async def test_block_is_idempotent_and_symmetric(store) -> None:
    alice, bob = store.add_user(), store.add_user()
    svc = BlockService(store)

    await svc.block_user(alice, bob)
    await svc.block_user(alice, bob)

    assert len(store.blocks) == 1
    assert await svc.is_blocked(alice, bob) is True
    assert await svc.is_blocked(bob, alice) is True


@pytest.mark.asyncio
async def test_block_rolls_back_when_teardown_fails(store) -> None:
    alice, bob = store.add_user(), store.add_user()
    store.fail_next_delete = True

    with pytest.raises(RuntimeError):
        await BlockService(store).block_user(alice, bob)
    assert store.blocks == {}


@pytest.mark.asyncio
async def test_cannot_block_self(store) -> None:
    alice = store.add_user()
    with pytest.raises(CannotBlockSelf) as exc:
        await BlockService(store).block_user(alice, alice)
    assert exc.value.status_code == 422


@pytest.mark.asyncio
async def test_block_unknown_user_is_not_found(store) -> None:
    alice = store.add_user()
    with pytest.raises(UserNotFound):
        await BlockService(store).block_user(alice, uuid4())


@pytest.mark.asyncio
async def test_unblock_does_not_restore_connection(store, clock) -> None:
    alice, bob = store.add_user(), store.add_user()
    connections = ConnectionService(store, clock=clock)
    blocks = BlockService(store)
    c = await connections.send_request(alice, bob)
    await connections.accept_request(c.id, bob)
    await blocks.block_user(alice, bob)

    await blocks.unblock_user(alice, bob)
    await blocks.unblock_user(alice, bob)

    assert await blocks.is_blocked(alice, bob) is False
    assert store.connections == {}
    again = await connections.send_request(bob, alice)
    assert again.id != c.id


@pytest.mark.asyncio
async def test_blocked_list_is_owner_only(store) -> None:
    alice, bob, carol = store.add_user(), store.add_user("Bob"), store.add_user()
    svc = BlockService(store)
    await svc.block_user(alice, bob)
    await svc.block_user(carol, alice)

    items, total = await svc.get_blocked_users(alice, limit=20, offset=0)
    assert total == 1
    assert items[0].user.id == bob
    assert items[0].user.display_name == "Bob"


@pytest.mark.asyncio
async def test_report_is_recorded_pending(store) -> None:
    alice = store.add_user()
    post_id = uuid4()

    report = await BlockService(store).report(
        alice, ReportTargetType.POST, post_id, ReportReason.SPAM, "Link farm"
    )

    assert report.status == ReportStatus.PENDING
    assert report.target_id == post_id
    assert store.reports == [report]


@pytest.mark.asyncio
async def test_cannot_report_self(store) -> None:
    alice = store.add_user()
    with pytest.raises(CannotReportSelf):
        await BlockService(store).report(
            alice, ReportTargetType.USER, alice, ReportReason.HARASSMENT
        )
    assert store.reports == []
