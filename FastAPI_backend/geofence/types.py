from pydantic import BaseModel, ConfigDict, Field, ValidationError
from typing import Any, Dict, Mapping, Optional
from datetime import datetime, timezone

SAFE = "safe"
CAUTION = "caution"
HIGH_RISK = "high_risk"
RESTRICTED = "restricted"

ENTRY = "entry"
EXIT = "exit"


class InvalidInput(ValueError):
    """Raised when a sample or zone payload is missing fields or has non-numeric coordinates"""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocationSample(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject_id: str
    latitude: float
    longitude: float
    accuracy_meters: Optional[float] = None
    altitude_meters: Optional[float] = None
    speed_mps: Optional[float] = None
    heading_degrees: Optional[float] = None
    battery_level: Optional[int] = None
    timestamp: datetime = Field(default_factory=_utcnow)
    is_emergency: bool = False

    @classmethod
    def from_payload(cls, subject_id: str, payload: Mapping[str, Any], **overrides) -> "LocationSample":
        """
        Build a sample from a loosely shaped device payload.

        Accepts the short keys devices send (lat/lng/lon, accuracy, speed...) as
        well as the full field names. Range is not checked here.
        """
        data = {
            "subject_id": subject_id,
            "latitude": _first(payload, "latitude", "lat"),
            "longitude": _first(payload, "longitude", "lng", "lon"),
            "accuracy_meters": _first(payload, "accuracy_meters", "accuracy"),
            "altitude_meters": _first(payload, "altitude_meters", "altitude"),
            "speed_mps": _first(payload, "speed_mps", "speed"),
            "heading_degrees": _first(payload, "heading_degrees", "heading"),
            "battery_level": _first(payload, "battery_level", "battery"),
            "is_emergency": payload.get("is_emergency", False),
        }
        if payload.get("timestamp"):
            data["timestamp"] = payload["timestamp"]
        data.update(overrides)

        try:
            return cls(**{k: v for k, v in data.items() if v is not None})
        except ValidationError as e:
            raise InvalidInput(f"Invalid location sample for {subject_id}: {e}") from e


class Zone(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    center_latitude: float
    center_longitude: float
    radius_meters: float
    zone_type: str
    is_active: bool = True

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Zone":
        """Build a zone from a geo_zones database row"""
        try:
            return cls(
                id=str(row["id"]),
                name=row["name"],
                description=row.get("description") or "",
                center_latitude=row["center_lat"],
                center_longitude=row["center_lng"],
                radius_meters=row["radius_meters"],
                zone_type=row["zone_type"],
                is_active=row.get("is_active", True),
            )
        except (KeyError, ValidationError) as e:
            raise InvalidInput(f"Invalid zone row: {e}") from e


class Violation(BaseModel):
    model_config = ConfigDict(frozen=True)

    zone_id: str
    zone_name: str
    zone_type: str
    distance_meters: int
    description: str = ""


class AlertRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject_id: str
    message: str
    alert_type: str = "geofence"
    severity: str
    location_latitude: float
    location_longitude: float


class NotificationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = "emergency_alert"
    title: str
    message: str
    severity: str = "critical"
    subject_id: str
    metadata: Dict[str, Any]


class ZoneTransition(BaseModel):
    model_config = ConfigDict(frozen=True)

    zone_id: str
    event_type: str
    zone_name: Optional[str] = None
    zone_type: Optional[str] = None


def _first(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None
