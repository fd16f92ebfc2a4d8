from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

class ViolationOut(BaseModel):
    zone_id: str
    zone_name: str
    zone_type: str
    distance: int
    description: Optional[str]

class TrackLocationResponse(BaseModel):
    success: bool
    location_id: str
    violations: List[ViolationOut]
    message: str

class GeoZone(BaseModel):
    id: str
    name: str
    description: Optional[str]
    type: str
    center_lat: float
    center_lng: float
    radius_meters: float
    is_active: bool
    created_at: Optional[datetime]

class GeoZoneListResponse(BaseModel):
    zones: List[GeoZone]

class GeofenceEventResponse(BaseModel):
    success: bool
    alert_id: Optional[str]
    severity: str
    message: str
