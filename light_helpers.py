"""Helper functions for working with light states."""

import json
import logging
from typing import Any, Dict, Mapping, Optional, Union

from constants import LOW_BRIGHTNESS_FRACTION, MQTT_PAYLOAD_OFF, PROVENANCE_KEY
from models import LightBinding, LightState, Provenance

logger = logging.getLogger(__name__)


def merge_state(*states: Optional[Mapping[str, Any]]) -> LightState:
    """
    Merge partial states left to right, last write wins per field.
    A None value removes the field from the result.
    """
    merged: LightState = {}
    for state in states:
        if not state:
            continue
        for key, value in state.items():
            if value is None:
                merged.pop(key, None)
            else:
                merged[key] = value
    return merged


def is_state(light_state: Mapping[str, Any], reference: Mapping[str, Any]) -> bool:
    """Compare the keys of light_state that appear in reference."""
    subset = {key: light_state[key] for key in reference if key in light_state}
    return subset == dict(reference)


def is_from_device(light_state: Mapping[str, Any]) -> bool:
    return light_state.get(PROVENANCE_KEY) == Provenance.DEVICE.value


def stamp(command: Mapping[str, Any], provenance: Provenance) -> LightState:
    return {**command, PROVENANCE_KEY: provenance.value}


def device_command(light_state: Mapping[str, Any]) -> LightState:
    """
    Build the payload sent to the device for a desired state.

    If state is OFF all other settings must be omitted, otherwise the
    controller turns the light immediately back on.
    """
    if light_state.get("state") == MQTT_PAYLOAD_OFF:
        return {"state": MQTT_PAYLOAD_OFF}
    return {
        key: value
        for key, value in light_state.items()
        if key != PROVENANCE_KEY and value is not None
    }


def apply_transition_guard(command: LightState, binding: LightBinding) -> LightState:
    """
    Specifying a transition together with a small brightness value turns
    the light off, so swap in the binding's no-transition fields.
    """
    brightness = command.get(binding.brightness.prop)
    if brightness is None or not binding.transition_state:
        return command
    is_low_brightness = brightness < binding.brightness.steps * LOW_BRIGHTNESS_FRACTION
    if is_low_brightness and is_state(command, binding.transition_state):
        return {**command, **binding.no_transition_state}
    return command


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def rescale(value: float, lower: float, upper: float) -> float:
    """Map value from [lower, upper] onto a 0..1 fraction."""
    return (value - lower) / (upper - lower)


def decode_payload(payload: Union[bytes, str, None]) -> Optional[Dict[str, Any]]:
    """Parse a JSON object payload, returning None when it is unusable."""
    if isinstance(payload, bytes):
        text = payload.decode("utf-8", errors="replace")
    else:
        text = payload or ""
    try:
        message = json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        logger.error(f"Unable to parse device message {text!r}: {e}")
        return None
    if not isinstance(message, dict):
        logger.error(f"Ignoring non-object device message: {text!r}")
        return None
    return message
