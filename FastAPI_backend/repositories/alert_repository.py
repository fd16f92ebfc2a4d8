from config.database import get_db_connection
from geofence.types import AlertRequest, NotificationRequest
from psycopg2.extras import Json
from typing import Optional, List, Dict

class AlertRepository:
    """Persistence sink for the geofence pipeline plus alert history reads"""

    @staticmethod
    def save_alert(alert: AlertRequest) -> str:
        return AlertRepository.create_user_alert(
            alert.subject_id, alert.message, alert.alert_type, alert.severity,
            alert.location_latitude, alert.location_longitude
        )

    @staticmethod
    def save_notification(notification: NotificationRequest) -> str:
        return AlertRepository.create_admin_notification(
            notification.type, notification.title, notification.message,
            notification.severity, notification.subject_id, notification.metadata
        )

    @staticmethod
    def create_user_alert(user_id: str, message: str, alert_type: str, severity: str,
                          lat: Optional[float], lng: Optional[float]) -> str:
        with get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("""
                INSERT INTO user_alerts
                (user_id, message, alert_type, severity, location_lat, location_lng, is_read)
                VALUES (%s, %s, %s, %s, %s, %s, FALSE)
                RETURNING id
            """, (user_id, message, alert_type, severity, lat, lng))

            return str(cur.fetchone()['id'])

    @staticmethod
    def create_admin_notification(notification_type: str, title: str, message: str,
                                  severity: str, user_id: Optional[str],
                                  metadata: Dict) -> str:
        with get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("""
                INSERT INTO admin_notifications
                (type, title, message, severity, user_id, metadata)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING id
            """, (notification_type, title, message, severity, user_id, Json(metadata)))

            return str(cur.fetchone()['id'])

    @staticmethod
    def get_geofence_alerts(user_id: str, limit: int = 50) -> List[Dict]:
        with get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("""
                SELECT id, user_id, message, alert_type, severity, location_lat,
                       location_lng, is_read, created_at
                FROM user_alerts
                WHERE user_id = %s AND alert_type = 'geofence'
                ORDER BY created_at DESC
                LIMIT %s
            """, (user_id, limit))

            return [dict(row) for row in cur.fetchall()]
