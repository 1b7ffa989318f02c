"""Dashboard session: user actions applied to one page's state."""

import logging
from typing import Awaitable, Callable, Optional

from weather_dashboard.dashboard.state import DashboardState
from weather_dashboard.errors import DataUnavailable, LocationError
from weather_dashboard.location.geolocation import GeolocationProvider
from weather_dashboard.location.resolver import LocationResolver
from weather_dashboard.weather.models import Location
from weather_dashboard.weather.service import WeatherService

logger = logging.getLogger(__name__)

Render = Callable[[DashboardState], Awaitable[None]]


async def _no_render(state: DashboardState) -> None:
    return None


class DashboardSession:
    """Drives one dashboard page.

    Every state change is followed by a call to ``render``. Fetches are
    numbered and only the newest one may write weather data, the error
    message or the loading flag, so a slow earlier request never overwrites
    a later one. Location changes are numbered the same way: a device
    position that arrives after a newer search or position request is
    dropped.
    """

    def __init__(
        self,
        service: WeatherService,
        geolocation: GeolocationProvider,
        render: Optional[Render] = None,
        resolver: Optional[LocationResolver] = None,
        state: Optional[DashboardState] = None
    ):
        self.service = service
        self.geolocation = geolocation
        self.resolver = resolver or LocationResolver()
        self.state = state or DashboardState()
        self._render_state = render or _no_render
        self._fetch_seq = 0
        self._location_seq = 0
        self._fetching = False
        self._locating = False

    async def answer_consent(self, accept: bool) -> None:
        """Answer the one-time geolocation consent prompt.

        Accepting resolves the device position; declining fetches the
        current location. If the position cannot be resolved after
        accepting, the current location is fetched anyway and the
        geolocation error stays on screen. Answers after the first are
        ignored.
        """
        if not self.state.show_consent_prompt:
            logger.info("Consent prompt already answered, ignoring")
            return

        self.state.show_consent_prompt = False
        logger.info(f"Geolocation consent {'accepted' if accept else 'declined'}")
        if not accept:
            await self.refresh()
            return

        failure = await self.use_my_location()
        if failure is not None:
            logger.info(f"Falling back to {self.state.location.describe()}")
            await self.refresh(notice=failure)

    async def submit_search(self, city: str) -> None:
        """Search for a city; clears any coordinates before fetching.

        While the consent prompt is showing the search is only recorded;
        answering the prompt fetches it.
        """
        self._location_seq += 1
        self._locating = False
        self.state.location = Location.from_city(city)
        self.state.query = city

        if self.state.show_consent_prompt:
            logger.info(f"Search for {city!r} recorded until the consent prompt is answered")
            self._sync_loading()
            await self.render()
            return
        await self.refresh()

    async def use_my_location(self) -> Optional[str]:
        """Resolve the device position and fetch weather for it.

        Returns:
            The error message if the position could not be resolved, else None.
            A failure superseded by a newer location change also returns None.
        """
        self._location_seq += 1
        seq = self._location_seq
        self._locating = True
        self._sync_loading()
        self.state.error = None
        await self.render()

        async def show_retry(message: str) -> None:
            if seq == self._location_seq:
                await self._show_interim_error(message)

        try:
            coordinates = await self.resolver.resolve(self.geolocation, on_retry=show_retry)
        except LocationError as e:
            if seq != self._location_seq:
                logger.info(f"Ignoring failure of superseded position request #{seq}")
                return None
            self._locating = False
            self.state.error = e.message
            self._sync_loading()
            await self.render()
            return e.message

        if seq != self._location_seq:
            logger.info(f"Dropping position from superseded request #{seq}")
            return None

        self._locating = False
        self.state.location = Location(coordinates=coordinates)
        self.state.query = ""

        # Location changes only trigger a fetch once the prompt is gone
        if self.state.show_consent_prompt:
            self._sync_loading()
            await self.render()
            return None
        await self.refresh()
        return None

    async def refresh(self, notice: Optional[str] = None) -> None:
        """Fetch current conditions and forecast for the active location.

        Args:
            notice: Message shown while and after the fetch instead of
                clearing the error; a failed fetch replaces it.
        """
        self._fetch_seq += 1
        seq = self._fetch_seq
        location = self.state.location

        self._fetching = True
        self._sync_loading()
        self.state.error = notice
        await self.render()

        try:
            report = await self.service.fetch_weather(location)
        except DataUnavailable as e:
            if not self._is_current(seq):
                logger.info(f"Ignoring failure of superseded fetch #{seq}")
                return
            logger.warning(f"Fetch #{seq} for {location.describe()} failed: {e.message}")
            self.state.error = e.message
        except Exception:
            if self._is_current(seq):
                self._fetching = False
                self._sync_loading()
            raise
        else:
            if not self._is_current(seq):
                logger.info(f"Discarding result of superseded fetch #{seq}")
                return
            self.state.current = report.current
            self.state.forecast = report.forecast
            if location.by_coordinates and report.current.name:
                self.state.query = report.current.name

        self._fetching = False
        self._sync_loading()
        await self.render()

    async def render(self) -> None:
        await self._render_state(self.state)

    def _is_current(self, seq: int) -> bool:
        return seq == self._fetch_seq

    def _sync_loading(self) -> None:
        # Loading covers the newest fetch and the newest position request
        self.state.loading = self._fetching or self._locating

    async def _show_interim_error(self, message: str) -> None:
        self.state.error = message
        await self.render()
