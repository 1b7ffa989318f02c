"""Shared fixtures for the weather dashboard test suite."""

import copy
import os

# Settings are read at import time, so they must be in place before the app loads
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("OPENWEATHER_API_KEY", "test-key")

import pytest  # noqa: E402

from weather_dashboard.weather.models import CurrentConditions, ForecastSeries  # noqa: E402

# 2025-03-10 09:00 UTC, a Monday
FORECAST_START = 1741597200
THREE_HOURS = 3 * 60 * 60

TASHKENT_CURRENT = {
    "coord": {"lon": 69.2163, "lat": 41.2646},
    "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}],
    "main": {"temp": 24.6, "feels_like": 22.5, "humidity": 30, "pressure": 1015},
    "wind": {"speed": 3.6, "deg": 250},
    "clouds": {"all": 0},
    "dt": 1741597200,
    "sys": {"country": "UZ", "sunrise": 1741570200, "sunset": 1741612500},
    "timezone": 18000,
    "name": "Tashkent",
    "cod": 200,
}


def build_forecast(count: int = 40, category: str = "Clouds") -> dict:
    return {
        "cod": "200",
        "cnt": count,
        "list": [
            {
                "dt": FORECAST_START + i * THREE_HOURS,
                "main": {"temp": 10.0 + i, "temp_max": 12.4 + i, "temp_min": 8.5 + i},
                "weather": [{"main": category, "description": f"{category.lower()} {i}"}],
                "wind": {"speed": 2.0 + i / 10},
            }
            for i in range(count)
        ],
        "city": {"name": "Tashkent", "timezone": 0},
    }


@pytest.fixture
def current_payload() -> dict:
    return copy.deepcopy(TASHKENT_CURRENT)


@pytest.fixture
def forecast_payload() -> dict:
    return build_forecast()


@pytest.fixture
def current_conditions(current_payload) -> CurrentConditions:
    return CurrentConditions.model_validate(current_payload)


@pytest.fixture
def forecast_series(forecast_payload) -> ForecastSeries:
    return ForecastSeries.model_validate(forecast_payload)
