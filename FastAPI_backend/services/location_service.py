import structlog
from fastapi import HTTPException
from config.settings import LOCATION_HISTORY_LIMIT
from geofence.pipeline import GeofencePipeline
from geofence.types import LocationSample
from repositories.location_repository import LocationRepository
from models.request_models import LocationTrack
from models.response_models import TrackLocationResponse, ViolationOut

logger = structlog.get_logger(__name__)

class LocationService:
    @staticmethod
    def track_location(track: LocationTrack, pipeline: GeofencePipeline) -> TrackLocationResponse:
        sample_fields = dict(
            subject_id=track.subject_id,
            latitude=track.latitude,
            longitude=track.longitude,
            accuracy_meters=track.accuracy,
            altitude_meters=track.altitude,
            speed_mps=track.speed,
            heading_degrees=track.heading,
            battery_level=track.battery_level,
            is_emergency=track.is_emergency
        )
        if track.timestamp:
            sample_fields['timestamp'] = track.timestamp
        sample = LocationSample(**sample_fields)

        logger.info("location_received", subject_id=sample.subject_id,
                    latitude=sample.latitude, longitude=sample.longitude,
                    accuracy=sample.accuracy_meters, is_emergency=sample.is_emergency)

        try:
            location_id = LocationRepository.save_location(sample)
        except Exception as e:
            logger.error("location_track_failed", subject_id=sample.subject_id, error=str(e))
            raise HTTPException(status_code=500, detail="Failed to track location")

        try:
            result = pipeline.process(sample)
        except Exception as e:
            logger.error("geofence_evaluation_failed", subject_id=sample.subject_id,
                         location_id=location_id, error=str(e))
            raise HTTPException(status_code=500, detail="Failed to evaluate geofences")

        violations = [
            ViolationOut(
                zone_id=v.zone_id,
                zone_name=v.zone_name,
                zone_type=v.zone_type,
                distance=v.distance_meters,
                description=v.description
            )
            for v in result.violations
        ]

        return TrackLocationResponse(
            success=True,
            location_id=location_id,
            violations=violations,
            message=f"Entered {len(violations)} zone(s)" if violations else "Location tracked successfully"
        )

    @staticmethod
    def get_history(subject_id: str) -> dict:
        try:
            locations = LocationRepository.get_location_history(subject_id, LOCATION_HISTORY_LIMIT)
        except Exception as e:
            logger.error("location_history_failed", subject_id=subject_id, error=str(e))
            raise HTTPException(status_code=500, detail="Failed to fetch location history")

        return {
            "subject_id": subject_id,
            "locations": [
                {
                    "id": str(loc['id']),
                    "latitude": float(loc['latitude']),
                    "longitude": float(loc['longitude']),
                    "accuracy": float(loc['accuracy']) if loc['accuracy'] is not None else None,
                    "battery_level": loc['battery_level'],
                    "timestamp": loc['timestamp'].isoformat() if loc['timestamp'] else None,
                    "is_emergency": loc['is_emergency']
                }
                for loc in locations
            ]
        }
