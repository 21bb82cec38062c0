#teamtasks/api/realtime.py
import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from teamtasks.core.security import identity_from_token
from teamtasks.core.settings import settings
from teamtasks.realtime.hub import ConnectionHub, Subscription

logger = logging.getLogger("TeamTasks.RealtimeAPI")

router = APIRouter(tags=["Realtime"])


async def _forward_events(websocket: WebSocket, subscription: Subscription) -> None:
    while True:
        payload = await subscription.queue.get()
        await websocket.send_json(payload)


async def _stop_forwarder(forwarder: asyncio.Task, user_id: int) -> None:
    """
    Останавливает пересылку и забирает её результат: отправка могла упасть
    раньше, если клиент уже отключился.
    """
    forwarder.cancel()
    try:
        await forwarder
    except asyncio.CancelledError:
        pass
    except (WebSocketDisconnect, RuntimeError, OSError) as e:
        logger.debug(f"Event forwarding for user {user_id} stopped: {e!r}")


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket, token: Optional[str] = Query(None)):
    """
    Персональный канал событий. Токен берётся из ?token= или из auth cookie;
    канал всегда принадлежит владельцу токена.
    """
    token = token or websocket.cookies.get(settings.AUTH_COOKIE_NAME)
    identity = identity_from_token(token) if token else None
    if identity is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    hub: ConnectionHub = websocket.app.state.event_hub
    subscription = hub.subscribe(identity.user_id)
    await websocket.accept()
    forwarder = asyncio.create_task(_forward_events(websocket, subscription))
    try:
        while True:
            message = await websocket.receive_text()
            if message.strip().lower() == "ping":
                await websocket.send_json({"event": "pong"})
    except WebSocketDisconnect as e:
        logger.info(f"Socket of user {identity.user_id} closed (code {e.code})")
    finally:
        hub.unsubscribe(subscription)
        await _stop_forwarder(forwarder, identity.user_id)
