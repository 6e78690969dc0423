"""Philips Hue dimmer switch."""

import logging
from typing import Any, Dict, Optional

from constants import PHILIPS_BRIGHTNESS_MOVE, PHILIPS_BRIGHTNESS_STEP
from light_helpers import apply_transition_guard, is_state, stamp
from models import LightBinding, LightState, Provenance, TemplateCursor
from remote import RemoteService

logger = logging.getLogger(__name__)

BRIGHTNESS_ACTIONS = {
    "up-press": {"brightness_step": PHILIPS_BRIGHTNESS_STEP},
    "down-press": {"brightness_step": -PHILIPS_BRIGHTNESS_STEP},
    "up-hold": {"brightness_move": PHILIPS_BRIGHTNESS_MOVE},
    "down-hold": {"brightness_move": -PHILIPS_BRIGHTNESS_MOVE},
    "up-hold-release": {"brightness_move": 0},
    "down-hold-release": {"brightness_move": 0},
}


class PhilipsDimmerSwitch(RemoteService):
    """
    Dimmer switch with on, off, up and down buttons.

    Pressing on while the light is on cycles its templates, pressing off a
    second time in a row switches to the next light. Brightness holds are
    ramped by the device itself.
    """

    service_type = "philips-dimmer-switch"

    def handle_message(self, message: Dict[str, Any]):
        action = message.get("action")
        if action == "off-press" and message.get("counter") != 1:
            self.cycle_device()
            return
        index = self.device_index
        binding = self.lights[index]
        command = self.next_command(action, self.light_state(index), binding, self.cursors[index])
        if command is None:
            logger.debug(f"Ignoring action {action}")
            return
        self.set_command(index, command)

    def next_command(
        self,
        action: Optional[str],
        light_state: LightState,
        binding: LightBinding,
        cursor: TemplateCursor,
    ) -> Optional[LightState]:
        if action == "on-press":
            if not is_state(light_state, binding.on_state):
                logger.debug("Device is off, turning on")
                return dict(binding.on_state)
            logger.debug("Device is on, cycling template")
            if binding.templates:
                cursor.template_index = (cursor.template_index + 1) % len(binding.templates)
            return self.template_command(binding, cursor)
        if action == "on-hold":
            cursor.template_index = 0
            logger.debug("Reset template")
            return self.template_command(binding, cursor)
        if action == "off-press":
            logger.debug("Turning device off")
            return dict(binding.off_state)
        if action in BRIGHTNESS_ACTIONS:
            return dict(BRIGHTNESS_ACTIONS[action])
        return None

    @staticmethod
    def template_command(binding: LightBinding, cursor: TemplateCursor) -> LightState:
        template = binding.templates[cursor.template_index] if binding.templates else {}
        return {**binding.reset_template, **binding.on_state, **binding.no_transition_state, **template}

    def set_command(self, index: int, command: Optional[LightState]):
        if command is None:
            return
        binding = self.lights[index]
        record = self.desired_records[index]
        command = stamp(apply_transition_guard(command, binding), Provenance.CONTROL)
        logger.debug(f"Updating light record {record.name}: {command}")
        # drop whatever the previous command left in the record
        record.clear()
        record.set(command)
