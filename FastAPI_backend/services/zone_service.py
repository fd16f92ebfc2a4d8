import structlog
from fastapi import HTTPException
from repositories.zone_repository import ZoneRepository
from models.request_models import GeoZoneRequest
from models.response_models import GeoZone, GeoZoneListResponse

logger = structlog.get_logger(__name__)

def to_geo_zone(row: dict) -> GeoZone:
    return GeoZone(
        id=str(row['id']),
        name=row['name'],
        description=row.get('description'),
        type=row['zone_type'],
        center_lat=float(row['center_lat']),
        center_lng=float(row['center_lng']),
        radius_meters=float(row['radius_meters']),
        is_active=row['is_active'],
        created_at=row.get('created_at')
    )

class ZoneService:
    @staticmethod
    def list_zones() -> GeoZoneListResponse:
        try:
            rows = ZoneRepository.list_zones()
        except Exception as e:
            logger.error("geo_zones_fetch_failed", error=str(e))
            raise HTTPException(status_code=500, detail="Failed to fetch geo zones")

        return GeoZoneListResponse(zones=[to_geo_zone(row) for row in rows])

    @staticmethod
    def create_zone(request: GeoZoneRequest) -> dict:
        try:
            zone_id = ZoneRepository.create_zone(request.model_dump())
        except Exception as e:
            logger.error("geo_zone_create_failed", name=request.name, error=str(e))
            raise HTTPException(status_code=500, detail="Failed to create geo zone")

        logger.info("geo_zone_created", zone_id=zone_id, name=request.name, zone_type=request.zone_type)

        return {
            "success": True,
            "zone_id": zone_id
        }

    @staticmethod
    def update_zone(zone_id: str, request: GeoZoneRequest) -> dict:
        try:
            updated = ZoneRepository.update_zone(zone_id, request.model_dump())
        except Exception as e:
            logger.error("geo_zone_update_failed", zone_id=zone_id, error=str(e))
            raise HTTPException(status_code=500, detail="Failed to update geo zone")

        if not updated:
            raise HTTPException(status_code=404, detail="Geo zone not found")

        logger.info("geo_zone_updated", zone_id=zone_id, is_active=request.is_active)

        return {
            "success": True,
            "zone_id": zone_id
        }

    @staticmethod
    def delete_zone(zone_id: str) -> dict:
        try:
            deleted = ZoneRepository.delete_zone(zone_id)
        except Exception as e:
            logger.error("geo_zone_delete_failed", zone_id=zone_id, error=str(e))
            raise HTTPException(status_code=500, detail="Failed to delete geo zone")

        if not deleted:
            raise HTTPException(status_code=404, detail="Geo zone not found")

        logger.info("geo_zone_deleted", zone_id=zone_id)

        return {
            "success": True,
            "message": "Geo zone deleted successfully"
        }
