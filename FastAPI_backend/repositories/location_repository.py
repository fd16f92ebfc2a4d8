from config.database import get_db_connection
from geofence.types import LocationSample
from typing import List, Dict

class LocationRepository:
    @staticmethod
    def save_location(sample: LocationSample) -> str:
        with get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("""
                INSERT INTO location_tracks
                (user_id, latitude, longitude, accuracy, altitude, speed, heading,
                 battery_level, timestamp, is_emergency)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING id
            """, (
                sample.subject_id,
                sample.latitude,
                sample.longitude,
                sample.accuracy_meters,
                sample.altitude_meters,
                sample.speed_mps,
                sample.heading_degrees,
                sample.battery_level,
                sample.timestamp,
                sample.is_emergency
            ))

            return str(cur.fetchone()['id'])

    @staticmethod
    def get_location_history(subject_id: str, limit: int = 50) -> List[Dict]:
        with get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("""
                SELECT id, user_id, latitude, longitude, accuracy, altitude, speed,
                       heading, battery_level, timestamp, is_emergency
                FROM location_tracks
                WHERE user_id = %s
                ORDER BY timestamp DESC
                LIMIT %s
            """, (subject_id, limit))

            return [dict(row) for row in cur.fetchall()]
