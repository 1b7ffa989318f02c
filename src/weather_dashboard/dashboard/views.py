"""View models sent to the dashboard page."""

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class Icon(BaseModel):
    """Weather icon identifier and its color."""
    name: str = Field(..., description="Icon identifier, e.g. wi-day-sunny")
    color: str = Field(..., description="CSS color of the icon")


class Theme(BaseModel):
    """Background gradient and text tone derived from current conditions."""
    name: str
    gradient: Tuple[str, str, str] = Field(..., description="CSS colors from top-left to bottom-right")
    dark_text: bool = False

    @property
    def text_color(self) -> str:
        return "#1f2937" if self.dark_text else "#ffffff"


class ThemeView(BaseModel):
    """Theme as rendered by the page."""
    name: str
    gradient: Tuple[str, str, str]
    text_color: str


class CurrentPanel(BaseModel):
    """Headline panel of current conditions."""
    name: str
    icon: Icon
    temperature: int = Field(..., description="Rounded temperature in Celsius")
    description: str
    feels_like: int = Field(..., description="Rounded feels-like temperature in Celsius")
    coordinates: Optional[str] = Field(None, description="Coordinates label when resolved by position")


class DetailsPanel(BaseModel):
    """Detailed metrics of current conditions."""
    humidity: int
    pressure: int
    wind_speed: float
    wind_direction: int
    cloudiness: int
    sunrise: str
    sunset: str


class DailyCard(BaseModel):
    """One day of the daily forecast strip."""
    date: str
    icon: Icon
    temperature: int
    description: str
    high: int
    low: int
    wind_speed: float


class HourlyCard(BaseModel):
    """One slot of the hourly forecast strip."""
    time: str
    icon: Icon
    temperature: int
    description: str
    wind_speed: float


class DashboardView(BaseModel):
    """Complete render of a dashboard page."""
    theme: ThemeView
    query: str
    loading: bool
    error: Optional[str] = None
    show_consent_prompt: bool
    current: Optional[CurrentPanel] = None
    details: Optional[DetailsPanel] = None
    daily: List[DailyCard] = Field(default_factory=list)
    hourly: List[HourlyCard] = Field(default_factory=list)
