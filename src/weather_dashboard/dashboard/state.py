"""Per-session dashboard state."""

from typing import Optional

from pydantic import BaseModel, Field

from weather_dashboard.config import DEFAULT_CITY
from weather_dashboard.weather.models import CurrentConditions, ForecastSeries, Location


class DashboardState(BaseModel):
    """Everything one dashboard page shows, held for the life of its session."""
    location: Location = Field(default_factory=lambda: Location.from_city(DEFAULT_CITY))
    query: str = Field(DEFAULT_CITY, description="Text shown in the search box")
    current: Optional[CurrentConditions] = None
    forecast: Optional[ForecastSeries] = None
    loading: bool = False
    error: Optional[str] = None
    show_consent_prompt: bool = True
