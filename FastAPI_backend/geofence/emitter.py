from typing import List, Optional, Sequence, Tuple

from .types import (
    LocationSample, Violation, AlertRequest, NotificationRequest,
    HIGH_RISK, RESTRICTED,
)

# zone_type -> alert severity; types not listed raise no alert
ALERT_SEVERITY = {
    HIGH_RISK: "critical",
    RESTRICTED: "high",
}


def alert_severity(zone_type: str) -> Optional[str]:
    return ALERT_SEVERITY.get(zone_type)


def emit(subject_id: str, sample: LocationSample,
         violations: Sequence[Violation]) -> Tuple[List[AlertRequest], List[NotificationRequest]]:
    """
    Build the alert and admin notification for every violation of an
    alerting zone type. One violation yields exactly one of each; nothing
    is batched or deduplicated across zones.
    """
    alerts = []
    notifications = []

    for violation in violations:
        severity = alert_severity(violation.zone_type)
        if severity is None:
            continue

        alerts.append(AlertRequest(
            subject_id=subject_id,
            message=f"Alert: You have entered {violation.zone_name}. {violation.description}",
            alert_type="geofence",
            severity=severity,
            location_latitude=sample.latitude,
            location_longitude=sample.longitude
        ))

        notifications.append(NotificationRequest(
            type="emergency_alert",
            title=f"Tourist in {violation.zone_type} zone",
            message=f"Tourist {subject_id} has entered {violation.zone_name}",
            severity="critical",
            subject_id=subject_id,
            metadata={
                "zone_id": violation.zone_id,
                "zone_name": violation.zone_name,
                "location": {
                    "latitude": sample.latitude,
                    "longitude": sample.longitude
                },
                "distance_meters": violation.distance_meters
            }
        ))

    return alerts, notifications
