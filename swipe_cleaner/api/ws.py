"""WebSocket endpoint for live triage state."""

import json
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..models.session import TriageState
from .deps import get_triage_ws

router = APIRouter(tags=["websocket"])


class ConnectionManager:
    def __init__(self):
        self.active: list[WebSocket] = []

    async def connect(self, ws: WebSocket):
        await ws.accept()
        self.active.append(ws)

    def disconnect(self, ws: WebSocket):
        if ws in self.active:
            self.active.remove(ws)

    async def broadcast(self, message: dict):
        for ws in list(self.active):
            try:
                await ws.send_json(message)
            except Exception:
                self.disconnect(ws)


manager = ConnectionManager()


def state_message(state: TriageState) -> dict:
    return {"type": "state", "state": state.model_dump(mode="json")}


async def broadcast_state(state: TriageState) -> None:
    await manager.broadcast(state_message(state))


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    triage = get_triage_ws(ws)
    await manager.connect(ws)
    triage.add_state_listener(broadcast_state)

    try:
        await ws.send_json(state_message(triage.snapshot()))
        while True:
            data = await ws.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                continue

            if msg.get("action") == "get_state":
                await ws.send_json(state_message(triage.snapshot()))

    except WebSocketDisconnect:
        manager.disconnect(ws)
    except Exception:
        manager.disconnect(ws)
    finally:
        if not manager.active:
            triage.remove_state_listener(broadcast_state)
