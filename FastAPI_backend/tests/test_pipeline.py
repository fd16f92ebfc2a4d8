import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from geofence.pipeline import GeofencePipeline
from geofence.types import LocationSample, Zone


class StaticCatalog:
    def __init__(self, zones):
        self.zones = zones
        self.calls = 0

    def get_active_zones(self):
        self.calls += 1
        return self.zones


class RecordingSink:
    def __init__(self, fail_alerts=False, fail_notifications=False):
        self.alerts = []
        self.notifications = []
        self.fail_alerts = fail_alerts
        self.fail_notifications = fail_notifications

    def save_alert(self, alert):
        if self.fail_alerts:
            raise RuntimeError("user_alerts insert failed")
        self.alerts.append(alert)

    def save_notification(self, notification):
        if self.fail_notifications:
            raise RuntimeError("admin_notifications insert failed")
        self.notifications.append(notification)


def zone(zone_id, zone_type, radius=5000.0, is_active=True):
    return Zone(id=zone_id, name=f"Zone {zone_id}", description="", center_latitude=26.5775,
                center_longitude=93.1717, radius_meters=radius, zone_type=zone_type, is_active=is_active)


INSIDE = LocationSample(subject_id="T-1", latitude=26.5780, longitude=93.1720)
OUTSIDE = LocationSample(subject_id="T-1", latitude=26.1445, longitude=91.7362)


class TestGeofencePipeline:

    def test_violation_delivered_to_sink(self):

        sink = RecordingSink()
        pipeline = GeofencePipeline(StaticCatalog([zone("a", "high_risk")]), sink)

        result = pipeline.process(INSIDE)

        assert [v.zone_id for v in result.violations] == ["a"]
        assert sink.alerts == result.alerts
        assert sink.notifications == result.notifications
        assert result.delivery_failures == 0

    def test_safe_zone_reported_but_not_alerted(self):

        sink = RecordingSink()
        pipeline = GeofencePipeline(StaticCatalog([zone("a", "safe")]), sink)

        result = pipeline.process(INSIDE)

        assert len(result.violations) == 1
        assert sink.alerts == [] and sink.notifications == []

    def test_outside_all_zones(self):

        sink = RecordingSink()
        pipeline = GeofencePipeline(StaticCatalog([zone("a", "high_risk"), zone("b", "restricted")]), sink)

        result = pipeline.process(OUTSIDE)

        assert result.violations == []
        assert sink.alerts == []

    def test_empty_catalog(self):

        sink = RecordingSink()
        result = GeofencePipeline(StaticCatalog([]), sink).process(INSIDE)

        assert result.violations == [] and result.alerts == [] and result.notifications == []

    def test_sink_failure_is_counted_not_raised(self):

        sink = RecordingSink(fail_alerts=True)
        pipeline = GeofencePipeline(StaticCatalog([zone("a", "high_risk"), zone("b", "restricted")]), sink)

        result = pipeline.process(INSIDE)

        assert len(result.violations) == 2
        assert result.delivery_failures == 2
        # notifications still go out when the alert insert fails
        assert len(sink.notifications) == 2

    def test_catalog_failure_propagates(self):

        class BrokenCatalog:
            def get_active_zones(self):
                raise ConnectionError("database unavailable")

        with pytest.raises(ConnectionError):
            GeofencePipeline(BrokenCatalog(), RecordingSink()).process(INSIDE)

    def test_no_state_between_calls(self):

        catalog = StaticCatalog([zone("a", "high_risk")])
        pipeline = GeofencePipeline(catalog, RecordingSink())

        first = pipeline.process(INSIDE)
        second = pipeline.process(INSIDE)

        assert first.violations == second.violations
        assert catalog.calls == 2

    def test_disjoint_subjects_match_sequential(self):

        zones = [zone("a", "high_risk"), zone("b", "safe")]
        pipeline = GeofencePipeline(StaticCatalog(zones), RecordingSink())
        other = LocationSample(subject_id="T-2", latitude=26.5780, longitude=93.1720)

        interleaved = [pipeline.process(INSIDE), pipeline.process(other)]
        alone = GeofencePipeline(StaticCatalog(zones), RecordingSink()).process(other)

        assert interleaved[1].violations == alone.violations
        assert [a.subject_id for a in interleaved[1].alerts] == ["T-2"]
