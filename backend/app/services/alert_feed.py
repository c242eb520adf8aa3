"""Demo feed of port security events and maritime weather alerts.

Serves one entry at random from a fixed catalogue so the dashboard's alert
panels have something to display. No external data source is consulted.
"""

import random
import time
from datetime import datetime, timezone
from typing import Optional

from app.models.alerts import SecurityEvent, WeatherAlert

SECURITY_EVENT_CATALOGUE: tuple[dict, ...] = (
    {
        "title": "Customs Security Tightened at Port Shanghai",
        "location": "Port Shanghai, China",
        "severity": "High",
        "duration": "12 days",
        "inspection_rate": "35%",
        "clearance_time": "x2.1",
        "confidence": "85%",
        "description": "Enhanced security protocols implemented due to geopolitical tensions",
    },
    {
        "title": "Port Strike Negotiations at Rotterdam",
        "location": "Rotterdam Port, Netherlands",
        "severity": "Medium",
        "duration": "7 days",
        "inspection_rate": "15%",
        "clearance_time": "x1.3",
        "confidence": "70%",
        "description": "Labor union negotiations affecting port operations",
    },
    {
        "title": "Cyber Security Breach Detection",
        "location": "Los Angeles Port, USA",
        "severity": "Critical",
        "duration": "5 days",
        "inspection_rate": "50%",
        "clearance_time": "x3.0",
        "confidence": "95%",
        "description": "Potential cyber threat detected in port management systems",
    },
)

WEATHER_ALERT_CATALOGUE: tuple[dict, ...] = (
    {
        "type": "Typhoon Warning",
        "location": "South China Sea",
        "severity": "High",
        "affected_ports": ["Hong Kong", "Shanghai", "Ningbo"],
        "duration": "72 hours",
        "wind_speed": "150 km/h",
        "visibility": "< 500m",
        "recommendation": "All maritime operations suspended",
    },
    {
        "type": "Fog Advisory",
        "location": "North Atlantic",
        "severity": "Medium",
        "affected_ports": ["New York", "Boston", "Halifax"],
        "duration": "24 hours",
        "wind_speed": "25 km/h",
        "visibility": "< 200m",
        "recommendation": "Reduced vessel speed, enhanced navigation",
    },
    {
        "type": "Storm Warning",
        "location": "Mediterranean Sea",
        "severity": "Medium",
        "affected_ports": ["Barcelona", "Marseille", "Naples"],
        "duration": "48 hours",
        "wind_speed": "85 km/h",
        "visibility": "1-2 km",
        "recommendation": "Monitor vessel schedules, potential delays",
    },
)


def _stamp() -> tuple[str, datetime]:
    return str(time.time_ns() // 1_000_000), datetime.now(timezone.utc)


def next_security_event(rng: Optional[random.Random] = None) -> SecurityEvent:
    """Pick a security event from the catalogue."""
    entry = (rng or random).choice(SECURITY_EVENT_CATALOGUE)
    event_id, now = _stamp()
    return SecurityEvent(id=event_id, timestamp=now, **entry)


def next_weather_alert(rng: Optional[random.Random] = None) -> WeatherAlert:
    """Pick a weather alert from the catalogue."""
    entry = (rng or random).choice(WEATHER_ALERT_CATALOGUE)
    alert_id, now = _stamp()
    return WeatherAlert(id=alert_id, timestamp=now, **entry)
