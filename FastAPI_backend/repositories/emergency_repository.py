from config.database import get_db_connection
from psycopg2.extras import Json
from typing import Dict

class EmergencyRepository:
    @staticmethod
    def save_offline_alert(alert_data: Dict) -> str:
        with get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("""
                INSERT INTO emergency_alerts
                (user_id, user_name, type, message, severity, location_lat, location_lng,
                 status, created_at, device_info, offline_stored_at, synced_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s, 'active', %s, %s, %s, now())
                RETURNING id
            """, (
                alert_data['user_id'],
                alert_data.get('user_name'),
                alert_data['type'],
                alert_data['message'],
                alert_data['severity'],
                alert_data.get('location_lat'),
                alert_data.get('location_lng'),
                alert_data['created_at'],
                Json(alert_data.get('device_info') or {}),
                alert_data['stored_at']
            ))

            return str(cur.fetchone()['id'])

    @staticmethod
    def save_iot_alert(alert_data: Dict) -> str:
        with get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("""
                INSERT INTO iot_device_alerts
                (device_id, device_name, alert_type, message, location_lat, location_lng,
                 battery_level, signal_strength, status)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, 'active')
                RETURNING id
            """, (
                alert_data['device_id'],
                alert_data.get('device_name'),
                alert_data['alert_type'],
                alert_data['message'],
                alert_data['location_lat'],
                alert_data['location_lng'],
                alert_data.get('battery_level'),
                alert_data.get('signal_strength')
            ))

            return str(cur.fetchone()['id'])
