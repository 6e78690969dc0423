"""Topic and record naming."""

from constants import MQTT_TOPIC_PREFIX, RECORD_DESIRED_SUFFIX, RECORD_REPORT_SUFFIX


def topic_device(device_name: str) -> str:
    """Get MQTT topic a device (or remote) reports on."""
    return f"{MQTT_TOPIC_PREFIX}/{device_name}"


def topic_device_set(device_name: str) -> str:
    """Get MQTT topic for device commands."""
    return f"{MQTT_TOPIC_PREFIX}/{device_name}/set"


def record_report(light_path: str) -> str:
    """Get record key holding the state confirmed by the device."""
    return f"{light_path}/{RECORD_REPORT_SUFFIX}"


def record_desired(light_path: str) -> str:
    """Get record key holding the requested state."""
    return f"{light_path}/{RECORD_DESIRED_SUFFIX}"
