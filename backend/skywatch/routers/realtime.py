"""Live dashboard over a WebSocket.

Each connection gets its own ``DashboardCoordinator``; the station list and
selection live there, not in module globals.

Client messages:
- {"action": "select", "station_id": "..."}
- {"action": "refresh"}
- {"action": "seed"}  (in-process, or via the HTTP seed endpoint when SEED_MODE=remote)
- {"action": "ping"}

Server messages:
- {"type": "stations", "data": [...]}
- {"type": "snapshot", "data": {...}}
- {"type": "notification", "data": {"level", "message", "description"}}
- {"type": "error", "detail": "..."}
- {"type": "pong"}
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from skywatch.config import settings
from skywatch.errors import StationNotFound
from skywatch.services import seed_client
from skywatch.services.refresh import DashboardCoordinator, DatabaseSource

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


def _seed_trigger(source: DatabaseSource):
    if settings.seed_mode == "remote":
        return seed_client.trigger_seed
    return source.seed


@router.websocket("/ws/dashboard")
async def dashboard_socket(websocket: WebSocket):
    await websocket.accept()

    async def send_stations(stations):
        await websocket.send_json({
            "type": "stations",
            "data": [s.model_dump(mode="json") for s in stations],
        })

    async def send_snapshot(snapshot):
        await websocket.send_json({"type": "snapshot", "data": snapshot.model_dump(mode="json")})

    async def send_notification(notification):
        await websocket.send_json({"type": "notification", "data": notification.model_dump()})

    source = DatabaseSource()
    coordinator = DashboardCoordinator(
        source,
        seed_trigger=_seed_trigger(source),
        on_stations=send_stations,
        on_snapshot=send_snapshot,
        on_notify=send_notification,
    )

    try:
        await coordinator.mount()
        while True:
            data = await websocket.receive_json()
            action = data.get("action")

            if action == "select":
                try:
                    await coordinator.select_station(data.get("station_id", ""))
                except StationNotFound as e:
                    await websocket.send_json({"type": "error", "detail": str(e)})

            elif action == "refresh":
                await coordinator.refresh()

            elif action == "seed":
                await coordinator.seed()

            elif action == "ping":
                await websocket.send_json({"type": "pong"})

            else:
                await websocket.send_json({"type": "error", "detail": f"Unknown action: {action}"})

    except WebSocketDisconnect:
        logger.debug("Dashboard socket disconnected")
    finally:
        await coordinator.unmount()
