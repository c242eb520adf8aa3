"""Port security event and maritime weather alert models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SecurityEvent(BaseModel):
    """A security incident affecting port operations."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    location: str
    severity: str = Field(..., description="Critical, High, Medium or Low")
    duration: str
    inspection_rate: str = Field(..., alias="inspectionRate")
    clearance_time: str = Field(
        ..., alias="clearanceTime", description="Multiplier on normal clearance"
    )
    confidence: str
    description: str
    timestamp: datetime


class WeatherAlert(BaseModel):
    """A maritime weather alert with affected ports."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: str
    location: str
    severity: str
    affected_ports: list[str] = Field(..., alias="affectedPorts")
    duration: str
    wind_speed: str = Field(..., alias="windSpeed")
    visibility: str
    recommendation: str
    timestamp: datetime


class SecurityEventResponse(BaseModel):
    success: bool
    message: str
    event: SecurityEvent


class WeatherAlertResponse(BaseModel):
    success: bool
    message: str
    alert: WeatherAlert
