"""Display transforms from weather data to dashboard views."""

import math
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from weather_dashboard.dashboard.state import DashboardState
from weather_dashboard.dashboard.views import (
    CurrentPanel, DailyCard, DashboardView, DetailsPanel, HourlyCard, Icon, Theme, ThemeView
)
from weather_dashboard.weather.models import (
    CurrentConditions, ForecastPoint, ForecastSeries, Location
)

# The API reports 3-hour steps, 8 per day
POINTS_PER_DAY = 8

FALLBACK_CATEGORY = "clouds"

WEATHER_ICONS: Dict[str, Icon] = {
    "clear": Icon(name="wi-day-sunny", color="#facc15"),
    "clouds": Icon(name="wi-cloudy", color="#9ca3af"),
    "rain": Icon(name="wi-rain", color="#60a5fa"),
    "snow": Icon(name="wi-snow", color="#ffffff"),
    "fog": Icon(name="wi-fog", color="#d1d5db"),
    "thunderstorm": Icon(name="wi-thunderstorm", color="#c084fc"),
}

DEFAULT_THEME = Theme(name="default", gradient=("#1e3a8a", "#581c87", "#312e81"))

WEATHER_THEMES: Dict[str, Theme] = {
    "clear": Theme(name="clear", gradient=("#eab308", "#fb923c", "#ef4444")),
    "clouds": Theme(name="clouds", gradient=("#6b7280", "#374151", "#111827")),
    "rain": Theme(name="rain", gradient=("#1d4ed8", "#1e40af", "#111827")),
    "snow": Theme(name="snow", gradient=("#bfdbfe", "#d1d5db", "#ffffff"), dark_text=True),
    "fog": Theme(name="fog", gradient=("#9ca3af", "#6b7280", "#4b5563"), dark_text=True),
    "thunderstorm": Theme(name="thunderstorm", gradient=("#6b21a8", "#111827", "#000000")),
}


def weather_icon(category: str) -> Icon:
    """Icon for a weather category, case-insensitive; unknown categories get the clouds icon."""
    return WEATHER_ICONS.get(category.lower(), WEATHER_ICONS[FALLBACK_CATEGORY])


def weather_theme(category: Optional[str]) -> Theme:
    """Theme for a weather category; None or unknown categories get the default theme."""
    if not category:
        return DEFAULT_THEME
    return WEATHER_THEMES.get(category.lower(), DEFAULT_THEME)


def current_theme(current: Optional[CurrentConditions]) -> Theme:
    """Theme for the primary category of current conditions."""
    if current is None or current.primary_weather is None:
        return DEFAULT_THEME
    return weather_theme(current.primary_weather.main)


def round_temperature(value: float) -> int:
    """Round halves up, so 24.5 shows as 25 and -0.5 as 0."""
    return int(math.floor(value + 0.5))


def _local_datetime(timestamp: int, utc_offset: int) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone(timedelta(seconds=utc_offset)))


def format_date(timestamp: int, utc_offset: int = 0) -> str:
    """Format epoch seconds as e.g. 'Monday, March 10'."""
    moment = _local_datetime(timestamp, utc_offset)
    return f"{moment:%A}, {moment:%B} {moment.day}"


def format_time(timestamp: int, utc_offset: int = 0) -> str:
    """Format epoch seconds as 'HH:MM'."""
    return _local_datetime(timestamp, utc_offset).strftime("%H:%M")


def daily_points(series: ForecastSeries) -> List[ForecastPoint]:
    """Every 8th point of the 3-hour series, roughly one per day."""
    return series.points[::POINTS_PER_DAY]


def hourly_points(series: ForecastSeries) -> List[ForecastPoint]:
    """The first 8 points, roughly the next 24 hours."""
    return series.points[:POINTS_PER_DAY]


def _category(point) -> str:
    weather = point.primary_weather
    return weather.main if weather else ""


def _description(point) -> str:
    weather = point.primary_weather
    return weather.description if weather else ""


def build_current_panel(current: CurrentConditions, location: Location) -> CurrentPanel:
    coordinates = None
    if location.coordinates is not None:
        coordinates = f"Lat: {location.coordinates.lat:.2f}, Lon: {location.coordinates.lon:.2f}"

    return CurrentPanel(
        name=current.name,
        icon=weather_icon(_category(current)),
        temperature=round_temperature(current.main.temp),
        description=_description(current),
        feels_like=round_temperature(current.main.feels_like),
        coordinates=coordinates,
    )


def build_details_panel(current: CurrentConditions) -> DetailsPanel:
    return DetailsPanel(
        humidity=current.main.humidity,
        pressure=current.main.pressure,
        wind_speed=current.wind.speed,
        wind_direction=current.wind.deg,
        cloudiness=current.clouds.all,
        sunrise=format_time(current.sys.sunrise, current.timezone),
        sunset=format_time(current.sys.sunset, current.timezone),
    )


def build_daily_cards(series: ForecastSeries, utc_offset: int = 0) -> List[DailyCard]:
    return [
        DailyCard(
            date=format_date(point.dt, utc_offset),
            icon=weather_icon(_category(point)),
            temperature=round_temperature(point.main.temp),
            description=_description(point),
            high=round_temperature(point.main.temp_max),
            low=round_temperature(point.main.temp_min),
            wind_speed=point.wind.speed,
        )
        for point in daily_points(series)
    ]


def build_hourly_cards(series: ForecastSeries, utc_offset: int = 0) -> List[HourlyCard]:
    return [
        HourlyCard(
            time=format_time(point.dt, utc_offset),
            icon=weather_icon(_category(point)),
            temperature=round_temperature(point.main.temp),
            description=_description(point),
            wind_speed=point.wind.speed,
        )
        for point in hourly_points(series)
    ]


def _forecast_offset(state: DashboardState) -> int:
    if state.forecast is not None and state.forecast.city is not None:
        return state.forecast.city.timezone
    if state.current is not None:
        return state.current.timezone
    return 0


def build_dashboard_view(state: DashboardState) -> DashboardView:
    """Render the full dashboard view from session state."""
    theme = current_theme(state.current)
    view = DashboardView(
        theme=ThemeView(name=theme.name, gradient=theme.gradient, text_color=theme.text_color),
        query=state.query,
        loading=state.loading,
        error=state.error,
        show_consent_prompt=state.show_consent_prompt,
    )

    if state.current is not None:
        view.current = build_current_panel(state.current, state.location)
        view.details = build_details_panel(state.current)

    if state.forecast is not None:
        offset = _forecast_offset(state)
        view.daily = build_daily_cards(state.forecast, offset)
        view.hourly = build_hourly_cards(state.forecast, offset)

    return view
