"""Geofence violation detection and alerting core (pure, no I/O)"""
from .types import (
    LocationSample,
    Zone,
    Violation,
    AlertRequest,
    NotificationRequest,
    ZoneTransition,
    InvalidInput,
)
from .distance import haversine_distance
from .evaluator import evaluate
from .emitter import emit, alert_severity
from .transitions import diff_zones, event_severity
from .pipeline import GeofencePipeline, PipelineResult
