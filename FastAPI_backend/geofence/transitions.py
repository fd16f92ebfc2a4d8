from typing import Iterable, List, Sequence

from .types import Violation, ZoneTransition, ENTRY, EXIT, HIGH_RISK, RESTRICTED, CAUTION


def diff_zones(previous_zone_ids: Iterable[str], violations: Sequence[Violation]) -> List[ZoneTransition]:
    """Entries (in violation order) followed by exits (in previous order)"""
    previous = list(dict.fromkeys(previous_zone_ids))
    current_ids = {v.zone_id for v in violations}

    transitions = [
        ZoneTransition(zone_id=v.zone_id, event_type=ENTRY, zone_name=v.zone_name, zone_type=v.zone_type)
        for v in violations
        if v.zone_id not in previous
    ]
    transitions.extend(
        ZoneTransition(zone_id=zone_id, event_type=EXIT)
        for zone_id in previous
        if zone_id not in current_ids
    )
    return transitions


_EVENT_SEVERITY = {
    (HIGH_RISK, ENTRY): "critical",
    (HIGH_RISK, EXIT): "high",
    (RESTRICTED, ENTRY): "critical",
    (RESTRICTED, EXIT): "medium",
    (CAUTION, ENTRY): "medium",
    (CAUTION, EXIT): "low",
}


def event_severity(zone_type: str, event_type: str) -> str:
    return _EVENT_SEVERITY.get((zone_type, event_type), "low")


def event_message(zone_name: str, event_type: str) -> str:
    if event_type == ENTRY:
        return f"You have entered {zone_name}. Please exercise caution and follow safety guidelines."
    return f"You have exited {zone_name}. Stay alert and maintain safety protocols."
