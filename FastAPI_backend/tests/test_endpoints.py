import pytest
from unittest.mock import patch, MagicMock
from fastapi.testclient import TestClient
from datetime import datetime, timezone
import uuid
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from main_fastAPI import app, get_pipeline
from geofence.pipeline import GeofencePipeline
from geofence.types import Zone

client = TestClient(app)


class FakeCatalog:
    def __init__(self, zones):
        self.zones = zones

    def get_active_zones(self):
        return self.zones


KAZIRANGA = Zone(
    id="zone-kaz",
    name="Kaziranga High Risk",
    description="Wildlife area, travel with a guide",
    center_latitude=26.5775,
    center_longitude=93.1717,
    radius_meters=5000,
    zone_type="high_risk",
    is_active=True
)


@pytest.fixture
def sink():
    sink = MagicMock()
    app.dependency_overrides[get_pipeline] = lambda: GeofencePipeline(FakeCatalog([KAZIRANGA]), sink)
    yield sink
    app.dependency_overrides.clear()


class TestTrackLocationEndpoint:

    @patch('services.location_service.LocationRepository')
    def test_track_inside_high_risk_zone(self, mock_location_repo, sink):

        location_id = str(uuid.uuid4())
        mock_location_repo.save_location.return_value = location_id

        response = client.post("/location/track", json={
            "subject_id": "T-1",
            "latitude": 26.5780,
            "longitude": 93.1720,
            "accuracy": 8.0,
            "battery_level": 76
        })

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["location_id"] == location_id
        assert data["message"] == "Entered 1 zone(s)"
        assert data["violations"][0]["zone_name"] == "Kaziranga High Risk"
        assert data["violations"][0]["distance"] < 5000

        alert = sink.save_alert.call_args[0][0]
        assert alert.severity == "critical"
        notification = sink.save_notification.call_args[0][0]
        assert notification.title == "Tourist in high_risk zone"

        sample = mock_location_repo.save_location.call_args[0][0]
        assert sample.subject_id == "T-1"
        assert sample.accuracy_meters == 8.0

    @patch('services.location_service.LocationRepository')
    def test_track_outside_zones(self, mock_location_repo, sink):

        mock_location_repo.save_location.return_value = str(uuid.uuid4())

        response = client.post("/location/track", json={
            "subject_id": "T-1",
            "latitude": 26.1445,
            "longitude": 91.7362
        })

        assert response.status_code == 200
        data = response.json()
        assert data["violations"] == []
        assert data["message"] == "Location tracked successfully"
        sink.save_alert.assert_not_called()

    @patch('services.location_service.LocationRepository')
    def test_alert_sink_failure_still_succeeds(self, mock_location_repo, sink):

        mock_location_repo.save_location.return_value = str(uuid.uuid4())
        sink.save_alert.side_effect = Exception("insert failed")

        response = client.post("/location/track", json={
            "subject_id": "T-1",
            "latitude": 26.5780,
            "longitude": 93.1720
        })

        assert response.status_code == 200
        assert len(response.json()["violations"]) == 1

    @patch('services.location_service.LocationRepository')
    def test_track_storage_failure(self, mock_location_repo, sink):

        mock_location_repo.save_location.side_effect = Exception("connection refused")

        response = client.post("/location/track", json={
            "subject_id": "T-1",
            "latitude": 26.5780,
            "longitude": 93.1720
        })

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to track location"
        sink.save_alert.assert_not_called()

    @patch('services.location_service.LocationRepository')
    def test_zone_catalog_failure(self, mock_location_repo):

        mock_location_repo.save_location.return_value = str(uuid.uuid4())
        catalog = MagicMock()
        catalog.get_active_zones.side_effect = ConnectionError("zone lookup timed out")
        sink = MagicMock()
        app.dependency_overrides[get_pipeline] = lambda: GeofencePipeline(catalog, sink)

        try:
            response = TestClient(app, raise_server_exceptions=False).post("/location/track", json={
                "subject_id": "T-1",
                "latitude": 26.5780,
                "longitude": 93.1720
            })
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to evaluate geofences"
        assert mock_location_repo.save_location.called
        sink.save_alert.assert_not_called()

    def test_track_rejects_out_of_range_latitude(self, sink):

        response = client.post("/location/track", json={
            "subject_id": "T-1",
            "latitude": 95.0,
            "longitude": 93.1720
        })

        assert response.status_code == 422

    def test_track_requires_coordinates(self, sink):

        response = client.post("/location/track", json={"subject_id": "T-1"})

        assert response.status_code == 422

    @patch('services.location_service.LocationRepository')
    def test_location_history(self, mock_location_repo):

        mock_location_repo.get_location_history.return_value = [{
            'id': uuid.uuid4(),
            'latitude': 26.5780,
            'longitude': 93.1720,
            'accuracy': None,
            'battery_level': 50,
            'timestamp': datetime(2026, 10, 1, 9, 30, tzinfo=timezone.utc),
            'is_emergency': False
        }]

        response = client.get("/location/track/T-1")

        assert response.status_code == 200
        data = response.json()
        assert len(data["locations"]) == 1
        assert data["locations"][0]["timestamp"].startswith("2026-10-01T09:30")
        mock_location_repo.get_location_history.assert_called_once_with("T-1", 50)


class TestGeoZoneEndpoints:

    @patch('services.zone_service.ZoneRepository')
    def test_list_zones(self, mock_zone_repo):

        mock_zone_repo.list_zones.return_value = [{
            'id': uuid.uuid4(),
            'name': 'Old Market',
            'description': None,
            'zone_type': 'restricted',
            'center_lat': 26.18,
            'center_lng': 91.75,
            'radius_meters': 250.0,
            'is_active': True,
            'created_at': datetime(2026, 9, 1)
        }]

        response = client.get("/geo-zones")

        assert response.status_code == 200
        zones = response.json()["zones"]
        assert zones[0]["type"] == "restricted"
        assert zones[0]["radius_meters"] == 250.0

    @patch('services.zone_service.ZoneRepository')
    def test_create_zone(self, mock_zone_repo):

        zone_id = str(uuid.uuid4())
        mock_zone_repo.create_zone.return_value = zone_id

        response = client.post("/geo-zones", json={
            "name": "Old Market",
            "zone_type": "restricted",
            "center_lat": 26.18,
            "center_lng": 91.75,
            "radius_meters": 250
        })

        assert response.status_code == 200
        assert response.json()["zone_id"] == zone_id
        saved = mock_zone_repo.create_zone.call_args[0][0]
        assert saved["is_active"] is True

    def test_create_zone_rejects_non_positive_radius(self):

        response = client.post("/geo-zones", json={
            "name": "Nowhere",
            "zone_type": "safe",
            "center_lat": 0,
            "center_lng": 0,
            "radius_meters": 0
        })

        assert response.status_code == 422

    @patch('services.zone_service.ZoneRepository')
    def test_update_missing_zone(self, mock_zone_repo):

        mock_zone_repo.update_zone.return_value = False

        response = client.put(f"/geo-zones/{uuid.uuid4()}", json={
            "name": "Old Market",
            "zone_type": "restricted",
            "center_lat": 26.18,
            "center_lng": 91.75,
            "radius_meters": 250,
            "is_active": False
        })

        assert response.status_code == 404

    @patch('services.zone_service.ZoneRepository')
    def test_delete_zone(self, mock_zone_repo):

        mock_zone_repo.delete_zone.return_value = True

        response = client.delete(f"/geo-zones/{uuid.uuid4()}")

        assert response.status_code == 200
        assert response.json()["success"] is True

    @patch('services.zone_service.ZoneRepository')
    def test_create_zone_storage_failure(self, mock_zone_repo):

        mock_zone_repo.create_zone.side_effect = Exception("connection refused")

        response = client.post("/geo-zones", json={
            "name": "Old Market",
            "zone_type": "restricted",
            "center_lat": 26.18,
            "center_lng": 91.75,
            "radius_meters": 250
        })

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to create geo zone"

    @patch('services.zone_service.ZoneRepository')
    def test_update_zone_storage_failure(self, mock_zone_repo):

        mock_zone_repo.update_zone.side_effect = Exception("connection refused")

        response = client.put(f"/geo-zones/{uuid.uuid4()}", json={
            "name": "Old Market",
            "zone_type": "restricted",
            "center_lat": 26.18,
            "center_lng": 91.75,
            "radius_meters": 250
        })

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to update geo zone"

    @patch('services.zone_service.ZoneRepository')
    def test_delete_zone_storage_failure(self, mock_zone_repo):

        mock_zone_repo.delete_zone.side_effect = Exception("connection refused")

        response = client.delete(f"/geo-zones/{uuid.uuid4()}")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to delete geo zone"


class TestGeofenceAlertEndpoints:

    @patch('services.alert_service.AlertRepository')
    def test_high_risk_entry_event(self, mock_alert_repo):

        alert_id = str(uuid.uuid4())
        mock_alert_repo.create_user_alert.return_value = alert_id

        response = client.post("/alerts/geofence", json={
            "subject_id": "T-1",
            "zone_id": "zone-kaz",
            "zone_name": "Kaziranga High Risk",
            "zone_type": "high_risk",
            "event_type": "entry",
            "latitude": 26.578,
            "longitude": 93.172
        })

        assert response.status_code == 200
        data = response.json()
        assert data["alert_id"] == alert_id
        assert data["severity"] == "critical"
        args = mock_alert_repo.create_admin_notification.call_args[0]
        assert args[1] == "Geofence Alert: high_risk zone entry"
        assert args[3] == "critical"

    @patch('services.alert_service.AlertRepository')
    def test_restricted_exit_event(self, mock_alert_repo):

        mock_alert_repo.create_user_alert.return_value = str(uuid.uuid4())

        response = client.post("/alerts/geofence", json={
            "subject_id": "T-1",
            "zone_name": "Army Cantonment",
            "zone_type": "restricted",
            "event_type": "exit"
        })

        assert response.status_code == 200
        assert response.json()["severity"] == "medium"
        assert response.json()["message"].startswith("You have exited Army Cantonment")
        assert mock_alert_repo.create_admin_notification.call_args[0][3] == "warning"

    @patch('services.alert_service.AlertRepository')
    def test_caution_event_has_no_admin_notification(self, mock_alert_repo):

        mock_alert_repo.create_user_alert.return_value = str(uuid.uuid4())

        response = client.post("/alerts/geofence", json={
            "subject_id": "T-1",
            "zone_name": "Riverbank",
            "zone_type": "caution",
            "event_type": "entry"
        })

        assert response.json()["severity"] == "medium"
        mock_alert_repo.create_admin_notification.assert_not_called()

    def test_unknown_event_type_rejected(self):

        response = client.post("/alerts/geofence", json={
            "subject_id": "T-1",
            "zone_name": "Riverbank",
            "zone_type": "caution",
            "event_type": "loiter"
        })

        assert response.status_code == 422

    @patch('services.alert_service.AlertRepository')
    def test_list_geofence_alerts(self, mock_alert_repo):

        mock_alert_repo.get_geofence_alerts.return_value = [{
            'id': uuid.uuid4(),
            'message': 'Alert: You have entered Kaziranga High Risk. Wildlife area',
            'alert_type': 'geofence',
            'severity': 'critical',
            'location_lat': 26.578,
            'location_lng': 93.172,
            'is_read': False,
            'created_at': datetime(2026, 10, 1, 10, 0)
        }]

        response = client.get("/alerts/geofence/T-1")

        assert response.status_code == 200
        assert response.json()["alerts"][0]["severity"] == "critical"


class TestEmergencyEndpoints:

    @patch('services.emergency_service.AlertRepository')
    @patch('services.emergency_service.EmergencyRepository')
    def test_sync_offline_alert(self, mock_emergency_repo, mock_alert_repo):

        mock_emergency_repo.save_offline_alert.return_value = str(uuid.uuid4())

        response = client.post("/emergency/sync-offline", json={
            "id": "offline-1",
            "user_id": "T-1",
            "user_name": "Asha",
            "type": "panic",
            "message": "Help needed",
            "severity": "critical",
            "location_lat": 26.578,
            "location_lng": 93.172,
            "created_at": "2026-10-01T09:00:00Z",
            "storedAt": "2026-10-01T09:00:05Z"
        })

        assert response.status_code == 200
        assert response.json()["success"] is True
        args = mock_alert_repo.create_admin_notification.call_args[0]
        assert args[0] == "offline_alert_synced"
        assert args[1] == "Offline PANIC Alert Synced"
        assert args[5]["original_alert_id"] == "offline-1"

    @patch('services.emergency_service.EmergencyRepository')
    def test_sync_offline_alert_storage_failure(self, mock_emergency_repo):

        mock_emergency_repo.save_offline_alert.side_effect = Exception("insert failed")

        response = client.post("/emergency/sync-offline", json={
            "user_id": "T-1",
            "type": "panic",
            "message": "Help needed",
            "severity": "critical",
            "created_at": "2026-10-01T09:00:00Z",
            "storedAt": "2026-10-01T09:00:05Z"
        })

        assert response.status_code == 500

    @patch('services.emergency_service.EmergencyRepository')
    def test_iot_alert(self, mock_emergency_repo):

        mock_emergency_repo.save_iot_alert.return_value = str(uuid.uuid4())

        response = client.post("/iot-alert", json={
            "device_id": "BAND-7",
            "alert_type": "fall_detected",
            "message": "Fall detected",
            "location_lat": 26.578,
            "location_lng": 93.172,
            "battery_level": 40
        })

        assert response.status_code == 200
        assert response.json()["success"] is True


class TestHealthEndpoint:

    @patch('config.database.check_database')
    def test_health_reports_database(self, mock_check_database):

        mock_check_database.return_value = False

        response = client.get("/health")

        assert response.json()["status"] == "unhealthy"
