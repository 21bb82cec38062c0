# teamtasks/realtime/hub.py
"""
In-process WebSocket hub.

Each open socket gets a Subscription: an asyncio.Queue owned by the event
loop serving that socket. Publishing only schedules ``put_nowait`` on that
loop, so it is safe to call from the threadpool where sync endpoints run.
"""
import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from teamtasks.realtime.events import RealtimeEvent

logger = logging.getLogger("TeamTasks.Realtime")


@dataclass(eq=False)
class Subscription:
    user_id: int
    loop: asyncio.AbstractEventLoop
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)


class ConnectionHub:
    def __init__(self) -> None:
        self._subscriptions: Dict[int, List[Subscription]] = {}
        self._lock = threading.Lock()

    def subscribe(self, user_id: int, loop: Optional[asyncio.AbstractEventLoop] = None) -> Subscription:
        subscription = Subscription(user_id=user_id, loop=loop or asyncio.get_running_loop())
        with self._lock:
            self._subscriptions.setdefault(user_id, []).append(subscription)
        logger.info(f"User {user_id} subscribed to real-time events")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subs = self._subscriptions.get(subscription.user_id, [])
            if subscription in subs:
                subs.remove(subscription)
            if not subs:
                self._subscriptions.pop(subscription.user_id, None)
        logger.info(f"User {subscription.user_id} unsubscribed from real-time events")

    def connected_users(self) -> Set[int]:
        with self._lock:
            return set(self._subscriptions)

    def publish_to_user(self, user_id: int, event: RealtimeEvent) -> None:
        with self._lock:
            targets = list(self._subscriptions.get(user_id, []))
        self._deliver(targets, event)

    def broadcast(self, event: RealtimeEvent) -> None:
        with self._lock:
            targets = [s for subs in self._subscriptions.values() for s in subs]
        self._deliver(targets, event)

    def _deliver(self, targets: List[Subscription], event: RealtimeEvent) -> None:
        if not targets:
            return
        payload = event.model_dump(mode="json")
        for subscription in targets:
            try:
                subscription.loop.call_soon_threadsafe(subscription.queue.put_nowait, payload)
            except RuntimeError as e:
                # Цикл сокета уже закрыт: событие теряется, клиент перечитает данные
                logger.warning(f"Dropped '{event.event}' for user {subscription.user_id}: {e}")
