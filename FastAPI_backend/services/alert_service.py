import structlog
from fastapi import HTTPException
from config.settings import ALERT_HISTORY_LIMIT
from geofence.emitter import alert_severity
from geofence.transitions import event_severity, event_message
from geofence.types import ENTRY
from repositories.alert_repository import AlertRepository
from models.request_models import GeofenceEvent
from models.response_models import GeofenceEventResponse

logger = structlog.get_logger(__name__)

class AlertService:
    @staticmethod
    def record_geofence_event(event: GeofenceEvent) -> GeofenceEventResponse:
        """Alert for an explicit zone entry/exit reported by a client or the location worker"""
        severity = event_severity(event.zone_type, event.event_type)
        message = event_message(event.zone_name, event.event_type)

        logger.info("geofence_event_received", subject_id=event.subject_id,
                    zone_name=event.zone_name, zone_type=event.zone_type,
                    event_type=event.event_type, severity=severity)

        alert_id = None
        try:
            alert_id = AlertRepository.create_user_alert(
                event.subject_id, message, "geofence", severity,
                event.latitude, event.longitude
            )
        except Exception as e:
            logger.error("user_alert_create_failed", subject_id=event.subject_id, error=str(e))

        # only zone types that raise location alerts also page the admins
        if alert_severity(event.zone_type) is not None:
            verb = "entered" if event.event_type == ENTRY else "exited"
            try:
                AlertRepository.create_admin_notification(
                    "emergency_alert",
                    f"Geofence Alert: {event.zone_type} zone {event.event_type}",
                    f"Tourist {event.subject_id} has {verb} {event.zone_type} zone: {event.zone_name}",
                    "critical" if severity == "critical" else "warning",
                    event.subject_id,
                    {
                        "zone_id": event.zone_id,
                        "zone_name": event.zone_name,
                        "zone_type": event.zone_type,
                        "event_type": event.event_type,
                        "location": {"latitude": event.latitude, "longitude": event.longitude},
                        "accuracy": event.accuracy
                    }
                )
            except Exception as e:
                logger.error("admin_notification_create_failed", subject_id=event.subject_id, error=str(e))

        return GeofenceEventResponse(
            success=True,
            alert_id=alert_id,
            severity=severity,
            message=message
        )

    @staticmethod
    def get_geofence_alerts(subject_id: str) -> dict:
        try:
            alerts = AlertRepository.get_geofence_alerts(subject_id, ALERT_HISTORY_LIMIT)
        except Exception as e:
            logger.error("geofence_alerts_fetch_failed", subject_id=subject_id, error=str(e))
            raise HTTPException(status_code=500, detail="Failed to fetch alerts")

        return {
            "subject_id": subject_id,
            "alerts": [
                {
                    "id": str(alert['id']),
                    "message": alert['message'],
                    "alert_type": alert['alert_type'],
                    "severity": alert['severity'],
                    "location_lat": float(alert['location_lat']) if alert['location_lat'] is not None else None,
                    "location_lng": float(alert['location_lng']) if alert['location_lng'] is not None else None,
                    "is_read": alert['is_read'],
                    "created_at": alert['created_at'].isoformat() if alert['created_at'] else None
                }
                for alert in alerts
            ]
        }
