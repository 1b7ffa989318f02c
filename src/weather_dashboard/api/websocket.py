"""Websocket endpoint hosting one dashboard session per page."""

import asyncio
import logging
from typing import Any, Coroutine, Dict, Optional, Set

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from weather_dashboard.api.endpoints import get_weather_service
from weather_dashboard.dashboard.presentation import build_dashboard_view
from weather_dashboard.dashboard.session import DashboardSession
from weather_dashboard.dashboard.state import DashboardState
from weather_dashboard.location.browser import BrowserGeolocation
from weather_dashboard.weather.service import WeatherService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dashboard"])


class DashboardConnection:
    """Sends messages to one page, one at a time."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self._lock = asyncio.Lock()

    async def send(self, message: Dict[str, Any]) -> None:
        async with self._lock:
            await self.websocket.send_json(message)

    async def render(self, state: DashboardState) -> None:
        view = build_dashboard_view(state)
        await self.send({"type": "render", "view": view.model_dump(mode="json")})


def dispatch_message(
    session: DashboardSession,
    geolocation: BrowserGeolocation,
    message: Dict[str, Any]
) -> Optional[Coroutine]:
    """Route a page message.

    Geolocation answers and capability announcements are handled in place;
    user actions are returned as coroutines for the caller to schedule.
    """
    kind = message.get("type")

    if kind == "geolocation.result":
        geolocation.resolve(message)
        return None
    if kind == "hello":
        geolocation.configure(
            supported=bool(message.get("geolocation")),
            permissions_api=bool(message.get("permissions"))
        )
        return None
    if kind == "consent":
        return session.answer_consent(bool(message.get("accept")))
    if kind == "search":
        return session.submit_search(str(message.get("city") or ""))
    if kind == "use_location":
        return session.use_my_location()

    logger.warning(f"Ignoring unknown dashboard message type {kind!r}")
    return None


async def _run_action(action: Coroutine) -> None:
    try:
        await action
    except WebSocketDisconnect:
        logger.info("Page disconnected while an action was running")
    except Exception:
        logger.exception("Dashboard action failed")


@router.websocket("/ws/dashboard")
async def dashboard_socket(
    websocket: WebSocket,
    weather_service: WeatherService = Depends(get_weather_service)
):
    """Run a dashboard session for the lifetime of the connection."""
    await websocket.accept()
    connection = DashboardConnection(websocket)
    geolocation = BrowserGeolocation(connection.send)
    session = DashboardSession(weather_service, geolocation, render=connection.render)
    tasks: Set[asyncio.Task] = set()

    logger.info("Dashboard session opened")
    try:
        await session.render()
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                logger.warning("Ignoring dashboard message that is not JSON")
                continue
            if not isinstance(message, dict):
                logger.warning("Ignoring malformed dashboard message")
                continue

            action = dispatch_message(session, geolocation, message)
            if action is not None:
                task = asyncio.create_task(_run_action(action))
                tasks.add(task)
                task.add_done_callback(tasks.discard)
    except WebSocketDisconnect:
        logger.info("Dashboard session closed")
    finally:
        geolocation.cancel_pending()
        running = list(tasks)
        for task in running:
            task.cancel()
        await asyncio.gather(*running, return_exceptions=True)
