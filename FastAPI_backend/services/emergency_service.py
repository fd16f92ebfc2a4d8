import structlog
from datetime import datetime, timezone
from fastapi import HTTPException
from repositories.emergency_repository import EmergencyRepository
from repositories.alert_repository import AlertRepository
from models.request_models import OfflineEmergencyAlert, IoTAlert

logger = structlog.get_logger(__name__)

class EmergencyService:
    @staticmethod
    def sync_offline_alert(alert: OfflineEmergencyAlert) -> dict:
        try:
            alert_id = EmergencyRepository.save_offline_alert(alert.model_dump())
        except Exception as e:
            logger.error("offline_alert_sync_failed", user_id=alert.user_id, error=str(e))
            raise HTTPException(status_code=500, detail="Failed to sync alert")

        stored_at = alert.stored_at
        if stored_at.tzinfo is None:
            stored_at = stored_at.replace(tzinfo=timezone.utc)
        offline_ms = int((datetime.now(timezone.utc) - stored_at).total_seconds() * 1000)

        try:
            AlertRepository.create_admin_notification(
                "offline_alert_synced",
                f"Offline {alert.type.upper()} Alert Synced",
                f"Offline alert from {alert.user_name or alert.user_id} has been synced to the system",
                alert.severity,
                alert.user_id,
                {
                    "original_alert_id": alert.id,
                    "offline_duration": offline_ms,
                    "alert_type": alert.type
                }
            )
        except Exception as e:
            logger.warning("offline_alert_notification_failed", user_id=alert.user_id, error=str(e))

        logger.info("offline_alert_synced", alert_id=alert_id, user_id=alert.user_id, offline_ms=offline_ms)

        return {
            "success": True,
            "alert_id": alert_id,
            "message": "Offline alert synced successfully"
        }

    @staticmethod
    def record_iot_alert(alert: IoTAlert) -> dict:
        try:
            alert_id = EmergencyRepository.save_iot_alert(alert.model_dump())
        except Exception as e:
            logger.error("iot_alert_failed", device_id=alert.device_id, error=str(e))
            raise HTTPException(status_code=500, detail=str(e))

        logger.info("iot_alert_recorded", alert_id=alert_id, device_id=alert.device_id, alert_type=alert.alert_type)

        return {
            "success": True,
            "alert_id": alert_id
        }
