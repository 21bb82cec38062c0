import asyncio
import threading

import pytest

from teamtasks.realtime import events
from teamtasks.realtime.events import RealtimeEvent
from teamtasks.realtime.hub import ConnectionHub

@pytest.fixture
def loop():
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()

def _next(loop, subscription, timeout=1.0):
    return loop.run_until_complete(asyncio.wait_for(subscription.queue.get(), timeout))

def test_publish_to_user_reaches_only_that_user(loop):
    hub = ConnectionHub()
    alice = hub.subscribe(1, loop=loop)
    bob = hub.subscribe(2, loop=loop)

    hub.publish_to_user(1, RealtimeEvent(event=events.TASK_ASSIGNED, data={"task_id": 7}))

    payload = _next(loop, alice)
    assert payload["event"] == "task-assigned"
    assert payload["data"] == {"task_id": 7}
    assert "timestamp" in payload
    loop.run_until_complete(asyncio.sleep(0))
    assert bob.queue.empty()

def test_broadcast_reaches_every_subscription(loop):
    hub = ConnectionHub()
    first_tab = hub.subscribe(1, loop=loop)
    second_tab = hub.subscribe(1, loop=loop)
    other = hub.subscribe(2, loop=loop)

    hub.broadcast(RealtimeEvent(event=events.TASK_DELETED, data={"id": 3}))

    for subscription in (first_tab, second_tab, other):
        assert _next(loop, subscription)["data"] == {"id": 3}

def test_unsubscribe(loop):
    hub = ConnectionHub()
    subscription = hub.subscribe(5, loop=loop)
    assert hub.connected_users() == {5}
    hub.unsubscribe(subscription)
    assert hub.connected_users() == set()
    hub.publish_to_user(5, RealtimeEvent(event=events.TEAM_REMOVED))
    loop.run_until_complete(asyncio.sleep(0))
    assert subscription.queue.empty()

def test_publish_from_worker_thread(loop):
    hub = ConnectionHub()
    subscription = hub.subscribe(1, loop=loop)
    worker = threading.Thread(
        target=hub.publish_to_user,
        args=(1, RealtimeEvent(event=events.TEAM_UPDATED, data={"id": 1})),
    )
    worker.start()
    worker.join()
    assert _next(loop, subscription)["event"] == "team-updated"

def test_closed_loop_does_not_break_publishing(loop):
    hub = ConnectionHub()
    dead_loop = asyncio.new_event_loop()
    hub.subscribe(1, loop=dead_loop)
    dead_loop.close()
    alive = hub.subscribe(1, loop=loop)

    hub.publish_to_user(1, RealtimeEvent(event=events.TEAM_INVITATION))
    assert _next(loop, alive)["event"] == "team-invitation"
