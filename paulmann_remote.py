"""Paulmann remote with continuous brightness moves and a color wheel."""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from constants import (
    COLOR_TEMP_MAX,
    COLOR_TEMP_MIN,
    MODE_SWITCH_SENTINEL,
    MODE_SWITCH_VALUE,
    MOVE_INTERVAL,
    MOVE_TIMEOUT,
)
from light_helpers import rescale
from models import LightBinding, LightMode, LightState, RemoteConfig, TemplateCursor
from mqtt_bridge import MqttBridge
from remote import RemoteService
from state_store import StateStore

logger = logging.getLogger(__name__)

MoveStep = Callable[[LightState], Optional[LightState]]


class PaulmannRemote(RemoteService):
    """
    Remote with one action group per light.

    Holding a brightness button repeats the brightness step every
    ``move_interval`` seconds until ``brightness_stop`` arrives or
    ``move_timeout`` seconds have passed. The color temperature slider drives
    saturation while the light is in RGB mode (after a hue was picked) and
    color temperature otherwise. The slider reports 286 once when released
    and twice in a row when the white button is pressed; only the latter
    switches the light back to white.
    """

    service_type = "paulmann-remote"

    def __init__(
        self,
        store: StateStore,
        bridge: MqttBridge,
        config: RemoteConfig,
        move_interval: float = MOVE_INTERVAL,
        move_timeout: float = MOVE_TIMEOUT,
    ):
        super().__init__(store, bridge, config)
        for light in self.lights:
            if light.strategy is None:
                raise ValueError(f"Light '{light.record_name}' of {config.mqtt_device_name} has no strategy")
        self.move_interval = move_interval
        self.move_timeout = move_timeout
        self.brightness_move_timer: Optional[asyncio.TimerHandle] = None
        self.move_cancel_timer: Optional[asyncio.TimerHandle] = None
        self.mode_switch_count = 0

    async def stop(self):
        self.cancel_move()
        await super().stop()

    def handle_message(self, message: Dict[str, Any]):
        action = message.get("action")
        group = message.get("action_group")
        if not isinstance(group, int) or not 1 <= group <= len(self.lights):
            logger.debug(f"No device configured for action group {group}")
            return
        index = group - 1
        strategy = self.lights[index].strategy

        if action == "brightness_move_up":
            self.start_move(index, strategy.increment_brightness)
        elif action == "brightness_move_down":
            self.start_move(index, strategy.decrement_brightness)
        elif action == "brightness_stop":
            self.cancel_move()
        else:
            command = self.next_command(action, message, self.light_state(index), self.lights[index], self.cursors[index])
            self.set_command(index, command)

    def next_command(
        self,
        action: Optional[str],
        message: Dict[str, Any],
        light_state: LightState,
        binding: LightBinding,
        cursor: TemplateCursor,
    ) -> Optional[LightState]:
        strategy = binding.strategy
        if action == "on":
            return strategy.set_on_off(light_state, True)
        if action == "off":
            return strategy.set_on_off(light_state, False)
        if action == "color_temperature_move":
            color_temp = message.get("action_color_temperature")
            if not isinstance(color_temp, (int, float)):
                logger.debug(f"Ignoring color temperature move without value: {message}")
                return None
            if color_temp == MODE_SWITCH_SENTINEL and self.mode_switch_count == 0:
                self.mode_switch_count = 1
                return None
            if color_temp == MODE_SWITCH_SENTINEL:
                self.mode_switch_count = 0
                cursor.light_mode = LightMode.WHITE
                color_temp = MODE_SWITCH_VALUE
            else:
                self.mode_switch_count = 0
            percent = rescale(color_temp, COLOR_TEMP_MIN, COLOR_TEMP_MAX)
            if cursor.light_mode == LightMode.RGB:
                return strategy.set_saturation(light_state, percent)
            return strategy.set_color_temp_percent(light_state, percent)
        if action == "enhanced_move_to_hue_and_saturation":
            hue = message.get("action_hue")
            if not isinstance(hue, (int, float)):
                logger.debug(f"Ignoring hue move without hue: {message}")
                return None
            cursor.light_mode = LightMode.RGB
            return strategy.set_hue(light_state, hue)
        logger.debug(f"Ignoring action {action}")
        return None

    def start_move(self, index: int, step: MoveStep):
        """Apply step now and then on every interval until stopped."""
        self.cancel_move()
        loop = asyncio.get_running_loop()
        started = loop.time()

        def schedule(count: int):
            self.brightness_move_timer = loop.call_at(started + count * self.move_interval, repeat, count)

        def repeat(count: int):
            self.move_brightness(index, step)
            schedule(count + 1)

        self.move_brightness(index, step)
        schedule(1)
        self.move_cancel_timer = loop.call_later(self.move_timeout, self.cancel_move)

    def move_brightness(self, index: int, step: MoveStep):
        self.set_command(index, step(self.light_state(index)))

    def cancel_move(self):
        if self.brightness_move_timer is not None:
            self.brightness_move_timer.cancel()
            self.brightness_move_timer = None
        if self.move_cancel_timer is not None:
            self.move_cancel_timer.cancel()
            self.move_cancel_timer = None
