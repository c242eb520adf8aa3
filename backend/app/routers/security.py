"""Supply chain security and weather alert router."""

from fastapi import APIRouter

from app.models.alerts import SecurityEventResponse, WeatherAlertResponse
from app.services.alert_feed import next_security_event, next_weather_alert

router = APIRouter(prefix="/security", tags=["security"])


@router.post("/trigger-event", response_model=SecurityEventResponse)
async def trigger_security_event() -> SecurityEventResponse:
    """Raise a port security event for the dashboard's event monitor."""
    return SecurityEventResponse(
        success=True,
        message="Security event triggered successfully",
        event=next_security_event(),
    )


@router.get("/weather-alert", response_model=WeatherAlertResponse)
async def get_weather_alert() -> WeatherAlertResponse:
    """Return the current maritime weather alert."""
    return WeatherAlertResponse(
        success=True,
        message="Weather alert retrieved successfully",
        alert=next_weather_alert(),
    )
