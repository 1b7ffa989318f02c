"""API endpoints for the weather dashboard."""

import logging
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from weather_dashboard.config import DEFAULT_CITY
from weather_dashboard.dashboard.presentation import build_dashboard_view
from weather_dashboard.dashboard.state import DashboardState
from weather_dashboard.dashboard.views import DashboardView
from weather_dashboard.errors import DataUnavailable
from weather_dashboard.weather.models import Location
from weather_dashboard.weather.service import WeatherService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/weather", tags=["weather"])


async def get_weather_service() -> AsyncGenerator[WeatherService, None]:
    """Dependency yielding a weather service that is closed after use."""
    async with WeatherService() as weather_service:
        yield weather_service


@router.get("/", response_model=DashboardView)
async def get_dashboard_view(
    lat: Optional[float] = Query(
        None,
        ge=-90,
        le=90,
        description="Latitude in decimal degrees (use with lon)"
    ),
    lon: Optional[float] = Query(
        None,
        ge=-180,
        le=180,
        description="Longitude in decimal degrees (use with lat)"
    ),
    city: Optional[str] = Query(
        None,
        description="City name (alternative to lat/lon, not both)"
    ),
    weather_service: WeatherService = Depends(get_weather_service)
) -> DashboardView:
    """Render the dashboard for one location.

    Args:
        lat: Latitude in decimal degrees (must provide with lon)
        lon: Longitude in decimal degrees (must provide with lat)
        city: City name as alternative to lat/lon

    Returns:
        DashboardView with current conditions and forecast strips

    Raises:
        HTTPException: If parameters are invalid or the weather API fails
    """
    location = validate_weather_parameters(lat, lon, city)

    try:
        report = await weather_service.fetch_weather(location)
    except DataUnavailable as e:
        status_code = 404 if e.status_code == 404 else 502
        logger.error(f"Weather unavailable for {location.describe()} (upstream status {e.status_code})")
        raise HTTPException(status_code=status_code, detail=e.message)

    state = DashboardState(
        location=location,
        query=report.current.name if location.by_coordinates else location.city,
        current=report.current,
        forecast=report.forecast,
        show_consent_prompt=False,
    )
    return build_dashboard_view(state)


def validate_weather_parameters(
    lat: Optional[float],
    lon: Optional[float],
    city: Optional[str]
) -> Location:
    """
    Validate weather request parameters and build the location to query.

    Args:
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
        city: City name

    Returns:
        Location for the city or the coordinates

    Raises:
        HTTPException: If validation fails
    """
    has_coordinates = lat is not None or lon is not None
    has_city = city is not None

    if has_coordinates and has_city:
        raise HTTPException(
            status_code=400,
            detail="Cannot provide both coordinates and city name. Use either lat/lon OR city."
        )

    if not has_coordinates and not has_city:
        logger.info(f"Using default location: {DEFAULT_CITY}")
        return Location.from_city(DEFAULT_CITY)

    if has_coordinates:
        if lat is None or lon is None:
            raise HTTPException(
                status_code=400,
                detail="Both latitude and longitude must be provided when using coordinates."
            )
        return Location.from_coordinates(lat, lon)

    return Location.from_city(city)


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Health status response
    """
    return {"status": "healthy", "service": "weather-dashboard"}


@router.get("/info")
async def get_service_info() -> dict:
    """Get service information.

    Returns:
        Service information including default location and features
    """
    return {
        "service": "Weather Dashboard",
        "version": "0.1.0",
        "default_location": {"city": DEFAULT_CITY},
        "features": [
            "Current conditions and 5-day forecast",
            "City search or device geolocation",
            "Themes derived from current conditions"
        ],
        "data_source": "OpenWeather API"
    }
