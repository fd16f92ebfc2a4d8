from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime

class LocationTrack(BaseModel):
    subject_id: str
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    accuracy: Optional[float] = None
    altitude: Optional[float] = None
    speed: Optional[float] = None
    heading: Optional[float] = None
    battery_level: Optional[int] = Field(default=None, ge=0, le=100)
    timestamp: Optional[datetime] = None
    is_emergency: bool = False

class GeoZoneRequest(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    zone_type: str = Field(min_length=1)
    center_lat: float = Field(ge=-90, le=90)
    center_lng: float = Field(ge=-180, le=180)
    radius_meters: float = Field(gt=0)
    is_active: bool = True

class GeofenceEvent(BaseModel):
    subject_id: str
    zone_id: Optional[str] = None
    zone_name: str
    zone_type: str
    event_type: str = Field(pattern="^(entry|exit)$")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[float] = None
    timestamp: Optional[datetime] = None

class OfflineEmergencyAlert(BaseModel):
    id: Optional[str] = None
    user_id: str
    user_name: Optional[str] = None
    type: str
    message: str
    severity: str
    location_lat: Optional[float] = None
    location_lng: Optional[float] = None
    created_at: datetime
    stored_at: datetime = Field(alias="storedAt")
    device_info: Optional[Dict[str, Any]] = None

    model_config = {"populate_by_name": True}

class IoTAlert(BaseModel):
    device_id: str
    device_name: Optional[str] = None
    alert_type: str
    message: str
    location_lat: float
    location_lng: float
    battery_level: Optional[int] = None
    signal_strength: Optional[int] = None
