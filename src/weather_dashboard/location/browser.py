"""Geolocation provider backed by the dashboard page over a websocket."""

import asyncio
import itertools
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import ValidationError

from weather_dashboard.config import GEOLOCATION_TIMEOUT_SECONDS
from weather_dashboard.location.geolocation import (
    GeolocationProvider, PermissionState, PositionError, PositionErrorCode
)
from weather_dashboard.weather.models import Coordinates

logger = logging.getLogger(__name__)

Send = Callable[[Dict[str, Any]], Awaitable[None]]


class BrowserGeolocation(GeolocationProvider):
    """Asks the page for permission state and position and awaits its answer.

    Each request carries an id; the page replies with a ``geolocation.result``
    message holding the same id, which is fed to :meth:`resolve`.
    """

    def __init__(self, send: Send, timeout: float = GEOLOCATION_TIMEOUT_SECONDS):
        self._send = send
        self.timeout = timeout
        self._supported = False
        self._permissions_api = False
        self._ids = itertools.count(1)
        self._pending: Dict[int, asyncio.Future] = {}

    @property
    def supported(self) -> bool:
        return self._supported

    def configure(self, supported: bool, permissions_api: bool) -> None:
        """Record the capabilities announced by the page."""
        self._supported = supported
        self._permissions_api = permissions_api
        logger.info(f"Page geolocation support: {supported}, permissions API: {permissions_api}")

    def resolve(self, message: Dict[str, Any]) -> bool:
        """Deliver a page answer to the request waiting for it.

        Returns:
            True if a pending request took the answer
        """
        future = self._pending.get(message.get("id"))
        if future is None or future.done():
            logger.warning(f"Dropping geolocation answer with unknown id {message.get('id')!r}")
            return False
        future.set_result(message)
        return True

    async def query_permission(self) -> Optional[PermissionState]:
        if not self._permissions_api:
            return None
        try:
            answer = await self._request("query_permission")
        except asyncio.TimeoutError:
            logger.warning("Permission query timed out, treating permission as unknown")
            return None

        try:
            return PermissionState(answer.get("state"))
        except ValueError:
            logger.warning(f"Unknown permission state {answer.get('state')!r}")
            return None

    async def get_current_position(self) -> Coordinates:
        try:
            answer = await self._request("get_position")
        except asyncio.TimeoutError:
            raise PositionError(PositionErrorCode.TIMEOUT, "Timed out waiting for position")

        error = answer.get("error")
        if error:
            try:
                code = PositionErrorCode(error.get("code"))
            except ValueError:
                code = PositionErrorCode.POSITION_UNAVAILABLE
            raise PositionError(code, error.get("message", ""))

        try:
            return Coordinates.model_validate(answer.get("coords"))
        except ValidationError as e:
            logger.error(f"Invalid coordinates from page: {e}")
            raise PositionError(PositionErrorCode.POSITION_UNAVAILABLE, "Invalid position reported")

    def cancel_pending(self) -> None:
        """Cancel requests still waiting for the page."""
        for future in self._pending.values():
            if not future.done():
                future.cancel()
        self._pending.clear()

    async def _request(self, kind: str) -> Dict[str, Any]:
        request_id = next(self._ids)
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            await self._send({"type": f"geolocation.{kind}", "id": request_id})
            return await asyncio.wait_for(future, self.timeout)
        finally:
            self._pending.pop(request_id, None)
