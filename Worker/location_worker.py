import os
import json
import paho.mqtt.client as mqtt
import requests
import structlog
from datetime import datetime, timezone

from config.logging_config import setup_logging
from geofence.transitions import diff_zones
from geofence.types import LocationSample, Violation, InvalidInput, EXIT

FASTAPI_URL = os.getenv("FASTAPI_URL", "http://fastapi:8000")
MQTT_BROKER = os.getenv("MQTT_BROKER", "mqtt")
MQTT_PORT = int(os.getenv("MQTT_PORT", "1883"))
MQTT_USER = os.getenv("MQTT_USER", "safetrail")
MQTT_PASSWORD = os.getenv("MQTT_PASSWORD", "")

# Subscribe to all tracker topics
TOPIC_LOCATION = "tourist/+/location"
TOPIC_PANIC = "tourist/+/panic"

# Zones each subject was inside at its last sample: subject_id -> {zone_id: Violation}
last_zones = {}

logger = structlog.get_logger("location_worker")


def subject_from_topic(topic):
    """tourist/<subjectID>/location -> subjectID"""
    return topic.split('/')[1]


def parse_sample(subject_id, raw_payload, is_emergency=False):
    """Decode an MQTT payload into a LocationSample; None when malformed"""
    try:
        payload = json.loads(raw_payload)
        if not isinstance(payload, dict):
            raise InvalidInput("payload is not a JSON object")
        overrides = {"is_emergency": True} if is_emergency else {}
        return LocationSample.from_payload(subject_id, payload, **overrides)
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("payload_dropped", subject_id=subject_id, error=str(e))
        return None


def coordinates_in_range(sample):
    return -90 <= sample.latitude <= 90 and -180 <= sample.longitude <= 180


def build_track_payload(sample):
    return {
        "subject_id": sample.subject_id,
        "latitude": sample.latitude,
        "longitude": sample.longitude,
        "accuracy": sample.accuracy_meters,
        "altitude": sample.altitude_meters,
        "speed": sample.speed_mps,
        "heading": sample.heading_degrees,
        "battery_level": sample.battery_level,
        "timestamp": sample.timestamp.isoformat(),
        "is_emergency": sample.is_emergency
    }


def forward_location(sample):
    """POST the sample to the API; returns the response body or None on failure"""
    try:
        response = requests.post(
            f"{FASTAPI_URL}/location/track",
            json=build_track_payload(sample),
            timeout=5
        )

        if response.status_code == 200:
            return response.json()

        event = "panic_forward_rejected" if sample.is_emergency else "location_forward_rejected"
        logger.error(event, subject_id=sample.subject_id, status_code=response.status_code,
                     latitude=sample.latitude, longitude=sample.longitude)
    except requests.RequestException as e:
        logger.error("location_forward_failed", subject_id=sample.subject_id, error=str(e))

    return None


def report_exit(sample, violation):
    """Record a zone exit; entries are already alerted by /location/track"""
    try:
        requests.post(
            f"{FASTAPI_URL}/alerts/geofence",
            json={
                "subject_id": sample.subject_id,
                "zone_id": violation.zone_id,
                "zone_name": violation.zone_name,
                "zone_type": violation.zone_type,
                "event_type": EXIT,
                "latitude": sample.latitude,
                "longitude": sample.longitude,
                "accuracy": sample.accuracy_meters,
                "timestamp": sample.timestamp.isoformat()
            },
            timeout=5
        )
    except requests.RequestException as e:
        logger.error("zone_exit_report_failed", subject_id=sample.subject_id,
                     zone_id=violation.zone_id, error=str(e))


def violations_from_response(body):
    return [
        Violation(
            zone_id=v["zone_id"],
            zone_name=v["zone_name"],
            zone_type=v["zone_type"],
            distance_meters=v["distance"],
            description=v.get("description") or ""
        )
        for v in body.get("violations", [])
    ]


def handle_sample(client, sample):
    body = forward_location(sample)
    if body is None:
        return None

    violations = violations_from_response(body)
    previous = last_zones.get(sample.subject_id, {})
    transitions = diff_zones(previous.keys(), violations)
    if violations:
        last_zones[sample.subject_id] = {v.zone_id: v for v in violations}
    else:
        last_zones.pop(sample.subject_id, None)

    for transition in transitions:
        if transition.event_type == EXIT:
            report_exit(sample, previous[transition.zone_id])

    geofence_topic = f"tourist/{sample.subject_id}/geofence"
    geofence_payload = {
        "subject_id": sample.subject_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "is_emergency": sample.is_emergency,
        "transitions": [t.model_dump() for t in transitions],
        "violations": [v.model_dump() for v in violations]
    }
    client.publish(geofence_topic, json.dumps(geofence_payload), qos=1)

    logger.info("sample_relayed", subject_id=sample.subject_id,
                violations=len(violations), transitions=len(transitions))
    return transitions


def on_message_location(client, userdata, msg):
    subject_id = subject_from_topic(msg.topic)
    sample = parse_sample(subject_id, msg.payload)
    if sample is not None:
        handle_sample(client, sample)


def on_message_panic(client, userdata, msg):
    subject_id = subject_from_topic(msg.topic)
    sample = parse_sample(subject_id, msg.payload, is_emergency=True)
    if sample is None:
        logger.error("panic_dropped", subject_id=subject_id, reason="malformed payload")
        return
    if not coordinates_in_range(sample):
        logger.error("panic_dropped", subject_id=subject_id, reason="coordinates out of range",
                     latitude=sample.latitude, longitude=sample.longitude)
        return

    logger.warning("panic_received", subject_id=subject_id,
                   latitude=sample.latitude, longitude=sample.longitude)
    handle_sample(client, sample)


def on_connect(client, userdata, flags, reason_code, properties):
    logger.info("mqtt_connected", reason_code=str(reason_code))

    client.subscribe(TOPIC_LOCATION)
    client.subscribe(TOPIC_PANIC)

    client.message_callback_add(TOPIC_LOCATION, on_message_location)
    client.message_callback_add(TOPIC_PANIC, on_message_panic)

    logger.info("mqtt_subscribed", topics=[TOPIC_LOCATION, TOPIC_PANIC], api=FASTAPI_URL)


def main():
    setup_logging("safetrail-location-worker")

    client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
    client.username_pw_set(MQTT_USER, MQTT_PASSWORD)
    client.on_connect = on_connect

    logger.info("mqtt_connecting", broker=MQTT_BROKER, port=MQTT_PORT)
    client.connect(MQTT_BROKER, MQTT_PORT, 60)
    client.loop_forever()


if __name__ == "__main__":
    main()
