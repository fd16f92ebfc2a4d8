"""Service layer for business logic"""
from .location_service import LocationService
from .zone_service import ZoneService
from .alert_service import AlertService
from .emergency_service import EmergencyService
