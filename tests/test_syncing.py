import pytest

from eth_sdk.subscriptions import SubscriptionRegistry, build_subscriptions
from eth_sdk.syncing import SyncingState, SyncingStateMachine, SyncState

from helpers import ManualScheduler, RecordingTransport


def _status(current, highest):
    return {"syncing": True, "status": {"startingBlock": "0x0", "currentBlock": hex(current), "highestBlock": hex(highest)}}


STOPPED = {"syncing": False}


async def _syncing_sub(**kw):
    transport = RecordingTransport()
    scheduler = ManualScheduler()
    registry = SubscriptionRegistry(transport, build_subscriptions(**kw), scheduler=scheduler)
    events = []
    sub = await registry.subscribe("syncing")
    sub.on("data", lambda p: events.append(("data", p["currentBlock"] if p else p)))
    sub.on("changed", lambda p: events.append(("changed", p)))
    return transport, scheduler, registry, sub, events


@pytest.mark.asyncio
async def test_start_data_and_debounced_stop():
    transport, clock, _, sub, events = await _syncing_sub()
    assert transport.subscribed == [("syncing", [])]

    transport.notify(sub.id, _status(10, 1000))
    assert events == [("changed", True)]
    clock.run_ready()
    assert events == [("changed", True), ("data", 10)]

    clock.advance(0.1)
    transport.notify(sub.id, _status(500, 1000))
    clock.advance(0.6)
    # far from the tip when the window closed: still syncing
    assert sub.state.status is SyncState.SYNCING

    transport.notify(sub.id, STOPPED)
    clock.advance(0.5)
    clock.advance(5)
    assert events == [("changed", True), ("data", 10), ("data", 500), ("changed", False)]
    assert sub.state.status is SyncState.NOT_SYNCING


@pytest.mark.asyncio
async def test_new_update_restarts_the_stop_timer():
    transport, clock, _, sub, events = await _syncing_sub()
    transport.notify(sub.id, _status(10, 1000))
    clock.run_ready()
    transport.notify(sub.id, _status(950, 1000))  # near the tip
    clock.advance(0.4)
    transport.notify(sub.id, _status(960, 1000))
    clock.advance(0.4)
    assert ("changed", False) not in events

    clock.advance(0.1)
    assert events[-1] == ("changed", False)
    assert [e for e in events if e[0] == "changed"] == [("changed", True), ("changed", False)]


@pytest.mark.asyncio
async def test_stop_notification_before_syncing_is_ignored():
    transport, clock, _, sub, events = await _syncing_sub()
    transport.notify(sub.id, False)
    transport.notify(sub.id, STOPPED)
    clock.advance(10)
    assert events == []


@pytest.mark.asyncio
async def test_second_update_before_deferred_data_keeps_order():
    transport, clock, _, sub, events = await _syncing_sub()
    transport.notify(sub.id, _status(10, 1000))
    transport.notify(sub.id, _status(20, 1000))
    clock.run_ready()
    assert events == [("changed", True), ("data", 10), ("data", 20)]


@pytest.mark.asyncio
async def test_unsubscribe_cancels_pending_timer():
    transport, clock, registry, sub, events = await _syncing_sub()
    transport.notify(sub.id, _status(10, 1000))
    transport.notify(sub.id, _status(999, 1000))
    assert sub.state.stop_timer is not None

    assert await sub.unsubscribe() is True
    before = list(events)
    clock.advance(10)
    transport.notify(sub.id, _status(999, 1000))
    assert events == before
    assert clock.pending == 0
    assert transport.unsubscribed == [sub.id]
    assert registry.active == []


@pytest.mark.asyncio
async def test_configurable_window_and_threshold():
    transport, clock, _, sub, events = await _syncing_sub(syncing_debounce=2.0, syncing_near_tip=10)
    transport.notify(sub.id, _status(10, 1000))
    transport.notify(sub.id, _status(985, 1000))
    clock.advance(5)
    assert events[-1] == ("data", 985)  # 985 is not within 10 blocks of 1000

    transport.notify(sub.id, _status(995, 1000))
    clock.advance(1.9)
    assert events[-1] == ("data", 995)
    clock.advance(0.2)
    assert events[-1] == ("changed", False)


def test_cancel_pending_is_idempotent():
    state = SyncingState()
    state.cancel_pending()
    state.cancel_pending()
    assert state.stop_timer is None and state.deferred_data is None


@pytest.mark.parametrize(
    "output,expected",
    [
        (False, True),
        ({"currentBlock": 801, "highestBlock": 1000}, True),
        ({"currentBlock": 800, "highestBlock": 1000}, False),
        ({"startingBlock": 0}, False),
    ],
)
def test_near_tip(output, expected):
    assert SyncingStateMachine().is_near_tip(output) is expected
