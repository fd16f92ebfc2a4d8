import structlog
from config.database import get_db_connection
from geofence.types import Zone, InvalidInput
from typing import Optional, List, Dict

logger = structlog.get_logger(__name__)

ZONE_COLUMNS = """
    id, name, description, zone_type, center_lat, center_lng,
    radius_meters, is_active, created_at
"""

class ZoneRepository:
    @staticmethod
    def get_active_zones() -> List[Zone]:
        """Zone catalog snapshot for the geofence pipeline"""
        with get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"""
                SELECT {ZONE_COLUMNS}
                FROM geo_zones
                WHERE is_active = TRUE
                ORDER BY created_at ASC
            """)
            rows = cur.fetchall()

        zones = []
        for row in rows:
            try:
                zones.append(Zone.from_row(row))
            except InvalidInput as e:
                logger.warning("zone_row_skipped", zone_id=str(row.get('id')), error=str(e))
        return zones

    @staticmethod
    def list_zones() -> List[Dict]:
        with get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"""
                SELECT {ZONE_COLUMNS}
                FROM geo_zones
                ORDER BY created_at DESC
            """)

            return [dict(row) for row in cur.fetchall()]

    @staticmethod
    def get_zone_by_id(zone_id: str) -> Optional[Dict]:
        with get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"""
                SELECT {ZONE_COLUMNS}
                FROM geo_zones
                WHERE id = %s
            """, (zone_id,))

            result = cur.fetchone()
            return dict(result) if result else None

    @staticmethod
    def create_zone(zone_data: Dict) -> str:
        with get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("""
                INSERT INTO geo_zones
                (name, description, zone_type, center_lat, center_lng, radius_meters, is_active)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING id
            """, (
                zone_data['name'],
                zone_data.get('description'),
                zone_data['zone_type'],
                zone_data['center_lat'],
                zone_data['center_lng'],
                zone_data['radius_meters'],
                zone_data.get('is_active', True)
            ))

            return str(cur.fetchone()['id'])

    @staticmethod
    def update_zone(zone_id: str, zone_data: Dict) -> bool:
        with get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("""
                UPDATE geo_zones
                SET name = %s, description = %s, zone_type = %s, center_lat = %s,
                    center_lng = %s, radius_meters = %s, is_active = %s
                WHERE id = %s
            """, (
                zone_data['name'],
                zone_data.get('description'),
                zone_data['zone_type'],
                zone_data['center_lat'],
                zone_data['center_lng'],
                zone_data['radius_meters'],
                zone_data.get('is_active', True),
                zone_id
            ))

            return cur.rowcount > 0

    @staticmethod
    def delete_zone(zone_id: str) -> bool:
        with get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM geo_zones WHERE id = %s", (zone_id,))
            return cur.rowcount > 0
