"""Repository layer for database access"""
from .location_repository import LocationRepository
from .zone_repository import ZoneRepository
from .alert_repository import AlertRepository
from .emergency_repository import EmergencyRepository
