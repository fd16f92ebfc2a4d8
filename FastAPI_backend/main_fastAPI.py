from functools import lru_cache
from fastapi import FastAPI, Depends
from config.logging_config import setup_logging
from config.settings import API_VERSION
from geofence.pipeline import GeofencePipeline
from models.request_models import *
from models.response_models import *
from repositories.zone_repository import ZoneRepository
from repositories.alert_repository import AlertRepository
from services.location_service import LocationService
from services.zone_service import ZoneService
from services.alert_service import AlertService
from services.emergency_service import EmergencyService

setup_logging("safetrail-api")

app = FastAPI(
    title="SafeTrail Geofence Backend",
    description="N-Tier architecture with Repository + Service patterns around a pure geofence core",
    version=API_VERSION
)


@lru_cache(maxsize=1)
def get_pipeline() -> GeofencePipeline:
    """One pipeline per process, wired to the database zone catalog and alert sink"""
    return GeofencePipeline(zone_catalog=ZoneRepository, sink=AlertRepository)



@app.post("/location/track", response_model=TrackLocationResponse)
def track_location(track: LocationTrack, pipeline: GeofencePipeline = Depends(get_pipeline)):
    return LocationService.track_location(track, pipeline)


@app.get("/location/track/{subject_id}")
def get_location_history(subject_id: str):
    return LocationService.get_history(subject_id)



@app.get("/geo-zones", response_model=GeoZoneListResponse)
def list_geo_zones():
    return ZoneService.list_zones()


@app.post("/geo-zones")
def create_geo_zone(request: GeoZoneRequest):
    return ZoneService.create_zone(request)


@app.put("/geo-zones/{zone_id}")
def update_geo_zone(zone_id: str, request: GeoZoneRequest):
    return ZoneService.update_zone(zone_id, request)


@app.delete("/geo-zones/{zone_id}")
def delete_geo_zone(zone_id: str):
    return ZoneService.delete_zone(zone_id)



@app.post("/alerts/geofence", response_model=GeofenceEventResponse)
def geofence_event(event: GeofenceEvent):
    return AlertService.record_geofence_event(event)


@app.get("/alerts/geofence/{subject_id}")
def get_geofence_alerts(subject_id: str):
    return AlertService.get_geofence_alerts(subject_id)



@app.post("/emergency/sync-offline")
def sync_offline_alert(alert: OfflineEmergencyAlert):
    return EmergencyService.sync_offline_alert(alert)


@app.post("/iot-alert")
def iot_alert(alert: IoTAlert):
    return EmergencyService.record_iot_alert(alert)



@app.get("/health")
def health_check():
    """Health check endpoint"""
    from config.database import check_database

    db_healthy = check_database()

    return {
        "status": "healthy" if db_healthy else "unhealthy",
        "database": "connected" if db_healthy else "disconnected",
        "version": API_VERSION,
        "architecture": "N-Tier (Repository + Service)"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
