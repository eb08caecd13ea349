"""Request-scoped access to the engine living on app.state."""

from fastapi import Request, WebSocket

from ..services.triage_manager import TriageManager


def get_triage(request: Request) -> TriageManager:
    return request.app.state.triage


def get_triage_ws(ws: WebSocket) -> TriageManager:
    return ws.app.state.triage
