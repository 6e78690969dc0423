"""IKEA Tradfri remote cycling templates across several lights."""

import logging
from typing import Any, Dict, Optional

from light_helpers import apply_transition_guard, clamp, is_state
from models import LightBinding, LightState, TemplateCursor
from remote import RemoteService

logger = logging.getLogger(__name__)


class TradfriMultiRemote(RemoteService):
    """
    Tradfri remote driven by per-light binding configuration.

    Brightness steps are derived from the binding's brightness scale,
    the arrows cycle the binding's templates and ``toggle_hold`` moves on to
    the next configured light.
    """

    service_type = "tradfri-multi-remote"

    def handle_message(self, message: Dict[str, Any]):
        action = message.get("action")
        if action == "toggle_hold":
            self.cycle_device()
            return
        index = self.device_index
        binding = self.lights[index]
        command = self.next_command(action, self.light_state(index), binding, self.cursors[index])
        if command is None:
            logger.debug(f"Ignoring action {action}")
            return
        command = {**binding.command_template, **command}
        self.set_command(index, apply_transition_guard(command, binding))

    def next_command(
        self,
        action: Optional[str],
        light_state: LightState,
        binding: LightBinding,
        cursor: TemplateCursor,
    ) -> Optional[LightState]:
        prop = binding.brightness.prop
        steps = binding.brightness.steps
        brightness = light_state.get(prop, steps)
        step = round(steps / 10)
        leap = round(steps / 3)
        floor = max(1, round(steps * 0.02))

        if action == "toggle":
            if is_state(light_state, binding.on_state):
                return dict(binding.off_state)
            return dict(binding.on_state)
        if action == "brightness_up_click":
            return {prop: clamp(brightness + step, 0, steps)}
        if action == "brightness_down_click":
            return {prop: clamp(brightness - step, 0, steps)}
        if action == "brightness_up_hold":
            return {prop: leap if brightness < leap else steps}
        if action == "brightness_down_hold":
            return {prop: leap if brightness > leap else floor}
        if not binding.templates:
            return None
        if action == "arrow_left_click":
            cursor.template_index = (cursor.template_index - 1) % len(binding.templates)
            return self.template_command(binding, cursor)
        if action == "arrow_right_click":
            cursor.template_index = (cursor.template_index + 1) % len(binding.templates)
            return self.template_command(binding, cursor)
        if action == "arrow_left_hold":
            cursor.template_index = 0
            return self.template_command(binding, cursor)
        return None

    @staticmethod
    def template_command(binding: LightBinding, cursor: TemplateCursor) -> LightState:
        logger.debug(f"Template {cursor.template_index} for {binding.record_name}")
        # reset first so fields only the previous template set are cleared
        return {**binding.reset_template, **binding.templates[cursor.template_index]}
