"""
Geofence pipeline: zone catalog -> evaluator -> emitter -> sink.

The pipeline itself keeps no state between calls. Its two collaborators are
handed in once at construction:

    zone_catalog.get_active_zones() -> Sequence[Zone]
    sink.save_alert(AlertRequest)
    sink.save_notification(NotificationRequest)

Sink delivery is at most once, best effort: a failing write is logged and
counted in PipelineResult.delivery_failures, and the remaining writes still
run. Retrying is up to the caller.
"""
from dataclasses import dataclass, field
from typing import List, Protocol, Sequence

import structlog

from .emitter import emit
from .evaluator import evaluate
from .types import LocationSample, Zone, Violation, AlertRequest, NotificationRequest

logger = structlog.get_logger(__name__)


class ZoneCatalog(Protocol):
    def get_active_zones(self) -> Sequence[Zone]:
        ...


class AlertSink(Protocol):
    def save_alert(self, alert: AlertRequest) -> object:
        ...

    def save_notification(self, notification: NotificationRequest) -> object:
        ...


@dataclass
class PipelineResult:
    violations: List[Violation] = field(default_factory=list)
    alerts: List[AlertRequest] = field(default_factory=list)
    notifications: List[NotificationRequest] = field(default_factory=list)
    delivery_failures: int = 0


class GeofencePipeline:
    def __init__(self, zone_catalog: ZoneCatalog, sink: AlertSink):
        self.zone_catalog = zone_catalog
        self.sink = sink

    def process(self, sample: LocationSample) -> PipelineResult:
        zones = self.zone_catalog.get_active_zones()
        violations = evaluate(sample, zones)
        alerts, notifications = emit(sample.subject_id, sample, violations)

        result = PipelineResult(
            violations=violations,
            alerts=alerts,
            notifications=notifications
        )

        for alert, notification in zip(alerts, notifications):
            result.delivery_failures += self._deliver(self.sink.save_alert, alert, sample.subject_id)
            result.delivery_failures += self._deliver(self.sink.save_notification, notification, sample.subject_id)

        logger.info(
            "geofence_evaluated",
            subject_id=sample.subject_id,
            zones_checked=len(zones),
            violations=len(violations),
            alerts=len(alerts),
            delivery_failures=result.delivery_failures,
        )
        return result

    @staticmethod
    def _deliver(write, record, subject_id: str) -> int:
        try:
            write(record)
            return 0
        except Exception as e:
            logger.warning(
                "geofence_delivery_failed",
                subject_id=subject_id,
                record_type=type(record).__name__,
                error=str(e),
            )
            return 1
