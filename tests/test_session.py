"""Tests for the dashboard session: consent, search, geolocation and fetch cycles."""

import asyncio

import pytest

from fakes import FakeGeolocation, FakeWeatherService, Gate, renamed
from weather_dashboard.config import DEFAULT_CITY
from weather_dashboard.dashboard.presentation import build_dashboard_view
from weather_dashboard.dashboard.session import DashboardSession
from weather_dashboard.dashboard.state import DashboardState
from weather_dashboard.errors import DataUnavailable
from weather_dashboard.location.geolocation import PermissionState, PositionError, PositionErrorCode
from weather_dashboard.location.resolver import (
    RETRY_FAILED_MESSAGE, RETRYING_MESSAGE, UNSUPPORTED_MESSAGE, LocationResolver
)
from weather_dashboard.weather.models import Coordinates, Location

HERE = Coordinates(lat=41.2646, lon=69.2163)


async def _no_sleep(delay):
    return None


class Recorder:
    """Collects a snapshot of the state at every render."""

    def __init__(self):
        self.states = []

    async def __call__(self, state: DashboardState) -> None:
        self.states.append(state.model_copy(deep=True))


def _session(service, geolocation=None, state=None):
    recorder = Recorder()
    session = DashboardSession(
        service,
        geolocation or FakeGeolocation([HERE]),
        render=recorder,
        resolver=LocationResolver(sleep=_no_sleep),
        state=state,
    )
    return session, recorder


@pytest.fixture
def weather(current_conditions, forecast_series):
    return current_conditions, forecast_series


class TestInitialState:
    def test_starts_with_prompt_and_default_city(self):
        state = DashboardState()
        assert state.show_consent_prompt
        assert state.location == Location.from_city(DEFAULT_CITY)
        assert state.query == DEFAULT_CITY
        assert not state.loading
        assert state.error is None
        assert state.current is None and state.forecast is None


class TestConsent:
    @pytest.mark.asyncio
    async def test_decline_fetches_default_city(self, weather):
        service = FakeWeatherService(weather)
        session, recorder = _session(service)

        await session.answer_consent(False)

        assert service.calls == [Location.from_city(DEFAULT_CITY)]
        assert not session.state.show_consent_prompt
        assert session.state.current.name == "Tashkent"
        assert not session.state.loading
        assert recorder.states[0].loading
        assert not recorder.states[-1].loading

    @pytest.mark.asyncio
    async def test_accept_fetches_device_position(self, weather):
        current, forecast = weather
        service = FakeWeatherService((renamed(current, "Yunusobod"), forecast))
        session, _ = _session(service)

        await session.answer_consent(True)

        assert service.calls == [Location(coordinates=HERE)]
        assert session.state.location.coordinates == HERE
        assert session.state.location.city is None
        # The place name from the response replaces the search text
        assert session.state.query == "Yunusobod"

    @pytest.mark.asyncio
    async def test_prompt_never_reappears(self, weather):
        """Once answered, the prompt stays hidden through later answers, searches and errors."""
        service = FakeWeatherService(weather, DataUnavailable(404), weather)
        session, recorder = _session(service)

        await session.answer_consent(False)
        await session.answer_consent(True)
        await session.submit_search("Nowhere")
        await session.submit_search("Paris")

        assert len(service.calls) == 3
        assert all(not state.show_consent_prompt for state in recorder.states)

    @pytest.mark.asyncio
    async def test_nothing_is_fetched_before_the_prompt_is_answered(self, weather):
        """Using the device position while the prompt is showing sets the location without fetching."""
        service = FakeWeatherService(weather)
        session, _ = _session(service)

        await session.use_my_location()

        assert service.calls == []
        assert session.state.location.coordinates == HERE
        assert not session.state.loading

    @pytest.mark.asyncio
    async def test_accept_falls_back_to_current_city_when_position_fails(self, weather):
        """A failed position after accepting still shows the current city, with the error kept."""
        service = FakeWeatherService(weather)
        unavailable = PositionError(PositionErrorCode.POSITION_UNAVAILABLE, "nope")
        session, recorder = _session(service, FakeGeolocation([unavailable]))

        await session.answer_consent(True)

        assert service.calls == [Location.from_city(DEFAULT_CITY)]
        assert session.state.current.name == "Tashkent"
        assert session.state.error == "Geolocation error: nope"
        assert not session.state.loading
        assert recorder.states[-1].error == "Geolocation error: nope"

    @pytest.mark.asyncio
    async def test_fallback_failure_replaces_location_error(self):
        service = FakeWeatherService(DataUnavailable(500))
        unavailable = PositionError(PositionErrorCode.POSITION_UNAVAILABLE, "nope")
        session, _ = _session(service, FakeGeolocation([unavailable]))

        await session.answer_consent(True)

        assert session.state.error == "Location not found or API error"
        assert not session.state.loading

    @pytest.mark.asyncio
    async def test_search_before_the_prompt_is_answered_waits(self, weather):
        """A search while the prompt is showing is recorded; declining the prompt fetches it."""
        current, forecast = weather
        service = FakeWeatherService((renamed(current, "Paris"), forecast))
        session, recorder = _session(service)

        await session.submit_search("Paris")

        assert service.calls == []
        assert session.state.location == Location.from_city("Paris")
        assert session.state.query == "Paris"
        assert not session.state.loading
        assert recorder.states[-1].show_consent_prompt

        await session.answer_consent(False)

        assert service.calls == [Location.from_city("Paris")]
        assert session.state.current.name == "Paris"


class TestSearch:
    @pytest.mark.asyncio
    async def test_search_clears_coordinates(self, weather):
        """Searching for Paris drops the device position before the fetch starts."""
        service = FakeWeatherService(weather)
        state = DashboardState(location=Location(coordinates=HERE), query="", show_consent_prompt=False)
        session, recorder = _session(service, state=state)

        await session.submit_search("Paris")

        assert service.calls == [Location.from_city("Paris")]
        assert service.calls[0].coordinates is None
        assert recorder.states[0].location == Location.from_city("Paris")
        assert session.state.query == "Paris"

    @pytest.mark.asyncio
    async def test_search_text_is_kept_for_city_results(self, weather):
        service = FakeWeatherService(weather)
        session, _ = _session(service, state=DashboardState(show_consent_prompt=False))

        await session.submit_search("tashkent")

        assert session.state.query == "tashkent"

    @pytest.mark.asyncio
    async def test_failed_fetch_reports_error_and_keeps_data(self, weather):
        """A failed fetch shows the fixed error and leaves the last good data in place."""
        service = FakeWeatherService(weather, DataUnavailable(404))
        session, _ = _session(service, state=DashboardState(show_consent_prompt=False))

        await session.submit_search("Tashkent")
        await session.submit_search("Atlantis")

        assert session.state.error == "Location not found or API error"
        assert not session.state.loading
        assert session.state.current.name == "Tashkent"
        assert session.state.forecast is not None

    @pytest.mark.asyncio
    async def test_new_fetch_clears_previous_error(self, weather):
        service = FakeWeatherService(DataUnavailable(500), weather)
        session, _ = _session(service, state=DashboardState(show_consent_prompt=False))

        await session.submit_search("Atlantis")
        await session.submit_search("Tashkent")

        assert session.state.error is None

    @pytest.mark.asyncio
    async def test_unexpected_failure_clears_loading(self):
        service = FakeWeatherService(RuntimeError("boom"))
        session, _ = _session(service, state=DashboardState(show_consent_prompt=False))

        with pytest.raises(RuntimeError):
            await session.submit_search("Paris")

        assert not session.state.loading


class TestStaleResults:
    @pytest.mark.asyncio
    async def test_superseded_fetch_cannot_overwrite_newer_result(self, weather):
        """A slow earlier fetch finishing last is discarded."""
        current, forecast = weather
        slow = Gate((renamed(current, "Paris"), forecast))
        service = FakeWeatherService(slow, (renamed(current, "Berlin"), forecast))
        session, _ = _session(service, state=DashboardState(show_consent_prompt=False))

        first = asyncio.create_task(session.submit_search("Paris"))
        await asyncio.sleep(0)
        await session.submit_search("Berlin")
        slow.release()
        await first

        assert session.state.current.name == "Berlin"
        assert session.state.query == "Berlin"
        assert not session.state.loading

    @pytest.mark.asyncio
    async def test_superseded_failure_is_not_reported(self, weather):
        slow = Gate(DataUnavailable(404))
        service = FakeWeatherService(slow, weather)
        session, _ = _session(service, state=DashboardState(show_consent_prompt=False))

        first = asyncio.create_task(session.submit_search("Atlantis"))
        await asyncio.sleep(0)
        await session.submit_search("Tashkent")
        slow.release()
        await first

        assert session.state.error is None
        assert session.state.current.name == "Tashkent"

    @pytest.mark.asyncio
    async def test_superseded_fetch_does_not_clear_loading(self, weather):
        """Loading stays on until the newest fetch finishes, whatever order they complete in."""
        older, newer = Gate(weather), Gate(weather)
        service = FakeWeatherService(older, newer)
        session, _ = _session(service, state=DashboardState(show_consent_prompt=False))

        first = asyncio.create_task(session.submit_search("Paris"))
        await asyncio.sleep(0)
        second = asyncio.create_task(session.submit_search("Berlin"))
        await asyncio.sleep(0)

        older.release()
        await first
        assert session.state.loading

        newer.release()
        await second
        assert not session.state.loading

    @pytest.mark.asyncio
    async def test_late_position_cannot_overwrite_newer_search(self, weather):
        """A position arriving after a newer search is dropped."""
        current, forecast = weather
        held = Gate(HERE)
        service = FakeWeatherService((renamed(current, "Paris"), forecast))
        session, _ = _session(service, FakeGeolocation([held]), state=DashboardState(show_consent_prompt=False))

        locating = asyncio.create_task(session.use_my_location())
        await asyncio.sleep(0)
        await session.submit_search("Paris")
        held.release()
        await locating

        assert session.state.location == Location.from_city("Paris")
        assert session.state.location.coordinates is None
        assert session.state.query == "Paris"
        assert session.state.current.name == "Paris"
        assert service.calls == [Location.from_city("Paris")]
        assert not session.state.loading

    @pytest.mark.asyncio
    async def test_position_failure_does_not_clear_loading_of_running_fetch(self, weather):
        """A failed position request leaves loading on while a search is still being fetched."""
        slow = Gate(weather)
        service = FakeWeatherService(slow)
        unavailable = PositionError(PositionErrorCode.POSITION_UNAVAILABLE)
        session, _ = _session(service, FakeGeolocation([unavailable]), state=DashboardState(show_consent_prompt=False))

        searching = asyncio.create_task(session.submit_search("Paris"))
        await asyncio.sleep(0)

        await session.use_my_location()
        assert session.state.loading
        assert session.state.error == "Geolocation error: position unavailable"

        slow.release()
        await searching
        assert not session.state.loading
        assert session.state.current.name == "Tashkent"


class TestUseMyLocation:
    @pytest.mark.asyncio
    async def test_unsupported_device_reports_error(self, weather):
        service = FakeWeatherService(weather)
        session, _ = _session(service, FakeGeolocation(supported=False),
                              state=DashboardState(show_consent_prompt=False))

        await session.use_my_location()

        assert session.state.error == UNSUPPORTED_MESSAGE
        assert not session.state.loading
        assert service.calls == []

    @pytest.mark.asyncio
    async def test_denied_permission_keeps_city(self, weather):
        service = FakeWeatherService(weather)
        geolocation = FakeGeolocation([HERE], permission=PermissionState.DENIED)
        session, _ = _session(service, geolocation, state=DashboardState(show_consent_prompt=False))

        await session.use_my_location()

        assert session.state.location == Location.from_city(DEFAULT_CITY)
        assert geolocation.position_requests == 0
        assert not session.state.loading

    @pytest.mark.asyncio
    async def test_retry_shows_interim_message_then_succeeds(self, weather):
        service = FakeWeatherService(weather)
        geolocation = FakeGeolocation([PositionError(PositionErrorCode.PERMISSION_DENIED), HERE])
        session, recorder = _session(service, geolocation)

        await session.answer_consent(True)

        assert RETRYING_MESSAGE in [state.error for state in recorder.states]
        assert session.state.error is None
        assert service.calls == [Location(coordinates=HERE)]

    @pytest.mark.asyncio
    async def test_failed_retry_reports_final_message(self, weather):
        service = FakeWeatherService(weather)
        denied = PositionErrorCode.PERMISSION_DENIED
        geolocation = FakeGeolocation([PositionError(denied), PositionError(denied)])
        session, _ = _session(service, geolocation)

        await session.answer_consent(True)

        assert session.state.error == RETRY_FAILED_MESSAGE
        assert not session.state.loading
        assert geolocation.position_requests == 2
        # Accepting the prompt still shows the current city when the position fails
        assert service.calls == [Location.from_city(DEFAULT_CITY)]


class TestRenderedValues:
    @pytest.mark.asyncio
    async def test_tashkent_temperatures_round_from_response(self, weather):
        """Rendered temperatures are the rounded values of the mock response."""
        service = FakeWeatherService(weather)
        session, _ = _session(service)

        await session.answer_consent(False)
        view = build_dashboard_view(session.state)

        assert view.current.name == "Tashkent"
        assert view.current.temperature == 25
        assert view.current.feels_like == 23
        assert view.theme.name == "clear"
