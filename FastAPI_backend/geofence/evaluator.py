import math
from typing import List, Sequence

from .distance import haversine_distance
from .types import LocationSample, Zone, Violation


def evaluate(sample: LocationSample, zones: Sequence[Zone]) -> List[Violation]:
    """
    Test a sample against every active zone.

    Returns one Violation per active zone whose center lies within
    radius_meters of the sample (boundary inclusive), in the order the
    zones were given. Inactive zones are never measured.
    """
    violations = []

    for zone in zones:
        if not zone.is_active:
            continue

        distance = haversine_distance(
            sample.latitude, sample.longitude,
            zone.center_latitude, zone.center_longitude
        )

        if distance <= zone.radius_meters:
            violations.append(Violation(
                zone_id=zone.id,
                zone_name=zone.name,
                zone_type=zone.zone_type,
                distance_meters=_round_half_up(distance),
                description=zone.description
            ))

    return violations


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
