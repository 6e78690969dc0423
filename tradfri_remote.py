"""IKEA Tradfri remote controlling a single light."""

import logging
from typing import Any, Dict, Optional

from constants import (
    COLOR_FAMILY_KEYS,
    MQTT_PAYLOAD_OFF,
    MQTT_PAYLOAD_ON,
    TRADFRI_BRIGHTNESS_LEAP,
    TRADFRI_BRIGHTNESS_MAX,
    TRADFRI_BRIGHTNESS_MIN,
    TRADFRI_BRIGHTNESS_STEP,
    TRADFRI_TRANSITION,
)
from light_helpers import clamp
from models import LightState, RemoteConfig, TemplateCursor
from mqtt_bridge import MqttBridge
from remote import RemoteService
from state_store import StateStore
from templates import DEFAULT_COLOR_PRESETS

logger = logging.getLogger(__name__)


class TradfriRemote(RemoteService):
    """Toggle, brightness steps and a cycle through fixed color presets."""

    service_type = "tradfri-remote"

    def __init__(self, store: StateStore, bridge: MqttBridge, config: RemoteConfig):
        super().__init__(store, bridge, config)
        presets = config.color_presets if config.color_presets else DEFAULT_COLOR_PRESETS
        self.colors = [dict(preset) for preset in presets]

    def handle_message(self, message: Dict[str, Any]):
        cursor = self.cursors[0]
        command = self.next_command(message.get("action"), self.light_state(0), cursor)
        if command is None:
            logger.debug(f"Ignoring action {message.get('action')}")
            return
        self.set_command(0, {"transition": TRADFRI_TRANSITION, **command})

    def next_command(self, action: Optional[str], light_state: LightState, cursor: TemplateCursor) -> Optional[LightState]:
        brightness = light_state.get("brightness", TRADFRI_BRIGHTNESS_MAX)
        if action == "toggle":
            state = light_state.get("state", MQTT_PAYLOAD_OFF)
            return {"state": MQTT_PAYLOAD_OFF if state == MQTT_PAYLOAD_ON else MQTT_PAYLOAD_ON}
        if action == "brightness_up_click":
            return {"brightness": clamp(brightness + TRADFRI_BRIGHTNESS_STEP, TRADFRI_BRIGHTNESS_MIN, TRADFRI_BRIGHTNESS_MAX)}
        if action == "brightness_down_click":
            return {"brightness": clamp(brightness - TRADFRI_BRIGHTNESS_STEP, TRADFRI_BRIGHTNESS_MIN, TRADFRI_BRIGHTNESS_MAX)}
        if action == "brightness_up_hold":
            return {"brightness": TRADFRI_BRIGHTNESS_LEAP if brightness < TRADFRI_BRIGHTNESS_LEAP else TRADFRI_BRIGHTNESS_MAX}
        if action == "brightness_down_hold":
            return {"brightness": TRADFRI_BRIGHTNESS_LEAP if brightness > TRADFRI_BRIGHTNESS_LEAP else TRADFRI_BRIGHTNESS_MIN}
        if action == "arrow_left_click":
            cursor.template_index = (cursor.template_index - 1) % len(self.colors)
            return self.color_command(cursor.template_index)
        if action == "arrow_right_click":
            cursor.template_index = (cursor.template_index + 1) % len(self.colors)
            return self.color_command(cursor.template_index)
        if action == "arrow_left_hold":
            cursor.template_index = 0
            return self.color_command(cursor.template_index)
        return None

    def color_command(self, index: int) -> LightState:
        # color and color temperature are exclusive on the device, clear both first
        cleared = {key: None for key in COLOR_FAMILY_KEYS}
        logger.debug(f"Color preset {index}: {self.colors[index]}")
        return {**cleared, **self.colors[index]}
